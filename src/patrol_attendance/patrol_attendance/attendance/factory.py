from __future__ import annotations

from dataclasses import dataclass

from ..core.exceptions import ValidationError
from .policies.any_open_policy import AnyOpenPolicy
from .policies.base import CheckoutPolicy
from .policies.today_only_policy import TodayOnlyPolicy

DEFAULT_CHECKOUT_POLICY = TodayOnlyPolicy.name


@dataclass
class CheckoutPolicyFactory:
    """Factory Pattern: choose the same-site checkout policy from settings."""

    def for_name(self, name: str | None) -> CheckoutPolicy:
        key = (name or DEFAULT_CHECKOUT_POLICY).strip().lower()
        if key == TodayOnlyPolicy.name:
            return TodayOnlyPolicy()
        if key == AnyOpenPolicy.name:
            return AnyOpenPolicy()
        raise ValidationError(f"Unknown checkout policy: {name}")
