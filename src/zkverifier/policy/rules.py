"""Comparison rules applied to single public-signal values.

A rule is a callable ``rule(value) -> str | None`` returning the failure
reason, or None when the value is acceptable. Rules know nothing about the
signal layout; the validator decides which value each rule sees.

``validate`` runs rules in order and stops at the first failure, so a field
reports one reason at a time. ``when`` gates a group of rules on whether the
check is configured at all.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Iterable, Optional

from ..signals.codec import date_to_datetime

Rule = Callable[[Any], Optional[str]]

MSG_REQUIRED = "cannot be blank"
MSG_INVALID = "must be a valid value"
MSG_TOO_LATE = "date is too late"
MSG_TOO_EARLY = "date is too early"
MSG_BAD_DATE = "must be a valid date"


def _is_empty(value: Any) -> bool:
    return value is None or (hasattr(value, "__len__") and len(value) == 0)


def required(value: Any) -> str | None:
    return MSG_REQUIRED if _is_empty(value) else None


def equals(expected: Any) -> Rule:
    def rule(value: Any) -> str | None:
        return None if value == expected else MSG_INVALID
    return rule


def in_set(allowed: Iterable[Any]) -> Rule:
    members = frozenset(allowed)
    reason = "must be one of: " + ", ".join(sorted(str(m) for m in members))

    def rule(value: Any) -> str | None:
        return None if value in members else reason
    return rule


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return date_to_datetime(value)


def before_date(bound: datetime) -> Rule:
    """Value must be a date on or before ``bound`` (inclusive)."""
    def rule(value: date | None) -> str | None:
        if value is None:
            return MSG_BAD_DATE
        return None if _as_datetime(value) <= bound else MSG_TOO_LATE
    return rule


def after_date(bound: datetime) -> Rule:
    """Value must be a date strictly after ``bound``."""
    def rule(value: date | None) -> str | None:
        if value is None:
            return MSG_BAD_DATE
        return None if _as_datetime(value) > bound else MSG_TOO_EARLY
    return rule


def max_value(limit: int) -> Rule:
    def rule(value: int) -> str | None:
        return None if value <= limit else f"must be no greater than {limit}"
    return rule


def validate(value: Any, *rules: Rule) -> str | None:
    for rule in rules:
        reason = rule(value)
        if reason is not None:
            return reason
    return None


def when(condition: bool, *rules: Rule) -> Rule:
    """Apply ``rules`` only if ``condition`` holds; otherwise every value passes."""
    def rule(value: Any) -> str | None:
        return validate(value, *rules) if condition else None
    return rule


__all__ = [
    "Rule",
    "required",
    "equals",
    "in_set",
    "before_date",
    "after_date",
    "max_value",
    "validate",
    "when",
]
