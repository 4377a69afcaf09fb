"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_STATS_LIMIT = 12
DEFAULT_LIST_LIMIT = 200
DEFAULT_PAYROLL_WORKERS = 4

# Hourly rate for overtime is derived from a 160-hour working month.
STANDARD_MONTHLY_HOURS = 160

DEFAULT_ANNUAL_QUOTA = 14
DEFAULT_SICK_QUOTA = 7
DEFAULT_PERSONAL_QUOTA = 5
DEFAULT_MATERNITY_QUOTA = 90
DEFAULT_PATERNITY_QUOTA = 14
DEFAULT_UNPAID_QUOTA = 30
DEFAULT_CARRY_FORWARD_LIMIT = 5
