from __future__ import annotations

import logging
import threading
from dataclasses import replace
from decimal import Decimal
from typing import Mapping, Optional

from ..common.money import to_decimal
from ..common.validators import require_in_range
from ..core.enums import PayrollCycle
from ..core.exceptions import ConfigurationError, ValidationError
from .model import LeaveQuotas, PayrollPolicy, Settings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


class SettingsProvider:
    """Read side of the settings singleton.

    Computations receive the provider explicitly and call ``require()`` once per
    operation. The value is cached until ``invalidate()`` is called, which the
    write side does after every change.
    """

    def __init__(self, repository: SettingsRepository, *, cache: bool = True):
        self._repository = repository
        self._cache_enabled = cache
        self._lock = threading.Lock()
        self._cached: Optional[Settings] = None

    def get(self) -> Optional[Settings]:
        if not self._cache_enabled:
            return self._repository.get_settings()
        with self._lock:
            if self._cached is None:
                self._cached = self._repository.get_settings()
            return self._cached

    def require(self) -> Settings:
        settings = self.get()
        if settings is None:
            raise ConfigurationError("System settings not configured")
        return settings

    def invalidate(self) -> None:
        with self._lock:
            self._cached = None


def validate_settings(settings: Settings) -> Settings:
    q = settings.quotas
    for name in ("annual", "sick", "personal", "maternity", "paternity", "unpaid"):
        if int(getattr(q, name)) < 0:
            raise ValidationError(f"{name.capitalize()} leave quota cannot be negative")
    if int(settings.carry_forward_limit) < 0:
        raise ValidationError("Carry forward limit cannot be negative")

    p = settings.payroll
    require_in_range(p.tax_rate_percent, "Tax rate", low=Decimal("0"), high=Decimal("100"))
    require_in_range(p.overtime_multiplier, "Overtime rate", low=Decimal("1"))
    require_in_range(Decimal(p.pay_day), "Pay day", low=Decimal("1"), high=Decimal("31"))
    return settings


def settings_from_mapping(data: Mapping, *, base: Optional[Settings] = None) -> Settings:
    """Build Settings from an API payload shaped like ``Settings.to_dict()``.

    Fields absent from the payload keep the value from ``base`` (or the defaults).
    """

    base = base or Settings()
    leave = data.get("leaveSettings") or {}
    payroll = data.get("payrollSettings") or {}

    def _int(src: Mapping, key: str, current: int) -> int:
        if key not in src:
            return current
        try:
            return int(src[key])
        except (TypeError, ValueError):
            raise ValidationError(f"{key} must be a whole number")

    quotas = LeaveQuotas(
        annual=_int(leave, "annualLeaveQuota", base.quotas.annual),
        sick=_int(leave, "sickLeaveQuota", base.quotas.sick),
        personal=_int(leave, "personalLeaveQuota", base.quotas.personal),
        maternity=_int(leave, "maternityLeaveQuota", base.quotas.maternity),
        paternity=_int(leave, "paternityLeaveQuota", base.quotas.paternity),
        unpaid=_int(leave, "unpaidLeaveQuota", base.quotas.unpaid),
    )

    cycle = base.payroll.cycle
    if "payrollCycle" in payroll:
        try:
            cycle = PayrollCycle(str(payroll["payrollCycle"]).lower())
        except ValueError:
            raise ValidationError("Payroll cycle must be weekly, biweekly or monthly")

    policy = PayrollPolicy(
        tax_rate_percent=(
            to_decimal(payroll["taxRate"], "taxRate") if "taxRate" in payroll else base.payroll.tax_rate_percent
        ),
        overtime_multiplier=(
            to_decimal(payroll["overtimeRate"], "overtimeRate")
            if "overtimeRate" in payroll
            else base.payroll.overtime_multiplier
        ),
        pay_day=_int(payroll, "payDay", base.payroll.pay_day),
        cycle=cycle,
    )

    return replace(
        base,
        quotas=quotas,
        carry_forward_limit=_int(leave, "carryForwardLimit", base.carry_forward_limit),
        payroll=policy,
    )


class SettingsService:
    """Use case: create and update the settings singleton (admin)."""

    def __init__(self, repository: SettingsRepository, provider: SettingsProvider):
        self._repository = repository
        self._provider = provider

    def get_settings(self) -> Settings:
        return self._provider.require()

    def create_settings(self, settings: Settings) -> Settings:
        validate_settings(settings)
        if self._repository.get_settings() is not None:
            raise ConfigurationError("Only one settings record can exist")
        if not self._repository.create_settings(settings):
            raise ConfigurationError("Only one settings record can exist")
        self._provider.invalidate()
        logger.info("Settings created")
        return self._provider.require()

    def update_settings(self, changes: Mapping) -> Settings:
        current = self._repository.get_settings()
        if current is None:
            raise ConfigurationError("System settings not configured")
        updated = validate_settings(settings_from_mapping(changes, base=current))
        if not self._repository.update_settings(updated):
            raise ConfigurationError("System settings not configured")
        # In-flight computations keep the value they already read.
        self._provider.invalidate()
        logger.info(
            "Settings updated (tax_rate=%s, overtime=%s)",
            updated.payroll.tax_rate_percent,
            updated.payroll.overtime_multiplier,
        )
        return self._provider.require()
