"""HR Ledger package.

Leave-balance ledger and payroll engine, organized by feature modules
(settings, employees, attendance, leaves, payroll) with a thin Flask
controller layer over service/repository layers.
"""
