"""Public-signal validation.

``validate_proof`` checks that a proof can be read at all (shape), then runs
every field check against the merged :class:`VerifyOptions` and collects the
failures into a :class:`ValidationReport`. Field checks never stop each other;
only shape problems and registry outages abort the run.

Optional checks are wrapped in ``when`` and pass while their option is unset.
The identity-count and identity-creation-time bounds are alternatives: an
unconfigured or passing bound satisfies the pair, so it fails only when both
limits are configured and both are exceeded, with one error per bound.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Iterator, Sequence

from ..api.models import ZKProof
from ..errors import ConfigurationError, RootRejectedError, ShapeError, format_errors
from ..policy.options import VerifyOptions, count_limit_set, is_set
from ..policy.rules import (
    MSG_REQUIRED,
    Rule,
    after_date,
    before_date,
    equals,
    in_set,
    max_value,
    required,
    validate,
    when,
)
from .codec import decode_date, decode_text, encode_bytes, parse_decimal
from .layout import (
    PROOF_PATH,
    PROOF_SELECTOR_VALUE,
    PUB_SIGNALS_LENGTH,
    PUB_SIGNALS_PATH,
    PubSignal,
)


class ValidationReport(Mapping):
    """Field path -> failure reason. Empty means every check passed."""

    def __init__(self, errors: dict[str, str] | None = None):
        self._errors = dict(errors or {})

    def __getitem__(self, path: str) -> str:
        return self._errors[path]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._errors))

    def __len__(self) -> int:
        return len(self._errors)

    @property
    def ok(self) -> bool:
        return not self._errors

    def __str__(self) -> str:
        return format_errors(self._errors)

    def __repr__(self) -> str:
        return f"ValidationReport({self._errors!r})"


def years_before(moment: datetime, years: int) -> datetime:
    target = moment.year - years
    if target < 1:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        return moment.replace(year=target)
    except ValueError:  # Feb 29 in a non-leap target year
        return moment.replace(year=target, day=28)


def check_shape(proof: ZKProof | None) -> list[str]:
    errors: dict[str, str] = {}
    if proof is None or proof.proof is None:
        errors[PROOF_PATH] = MSG_REQUIRED
    signals = proof.pub_signals if proof is not None else None
    try:
        _check_signals_length(signals)
    except ShapeError as e:
        errors.update(e.errors)
    if errors:
        raise ShapeError(errors)
    return list(signals)


def _check_signals_length(signals: Sequence[str] | None) -> None:
    if not signals:
        raise ShapeError({PUB_SIGNALS_PATH: MSG_REQUIRED})
    if len(signals) != PUB_SIGNALS_LENGTH:
        raise ShapeError({PUB_SIGNALS_PATH: f"the length must be exactly {PUB_SIGNALS_LENGTH}"})


def _date_rule(path: str, *rules: Rule) -> Rule:
    def rule(raw: str) -> str | None:
        return required(raw) or validate(decode_date(raw, path), *rules)
    return rule


def _text_rule(path: str, *rules: Rule) -> Rule:
    def rule(raw: str) -> str | None:
        return validate(decode_text(raw, path), *rules)
    return rule


def validate_proof(proof: ZKProof | None, opts: VerifyOptions, now: datetime | None = None) -> ValidationReport:
    return validate_signals(check_shape(proof), opts, now=now)


def validate_signals(signals: Sequence[str], opts: VerifyOptions, now: datetime | None = None) -> ValidationReport:
    _check_signals_length(signals)
    now = now or datetime.now(timezone.utc)
    errors: dict[str, str] = {}

    def check(field: PubSignal, *rules: Rule) -> None:
        reason = validate(signals[field], *rules)
        if reason is not None:
            logging.debug("Public signal check failed %s: %s", field.path, reason)
            errors[field.path] = reason

    check(PubSignal.ID_STATE_HASH, lambda root: _check_root(root, opts))

    check(PubSignal.NULLIFIER, required)
    check(PubSignal.SELECTOR, required, equals(PROOF_SELECTOR_VALUE))
    expiration = PubSignal.EXPIRATION_DATE_LOWER_BOUND
    check(expiration, _date_rule(expiration.path, after_date(now)))

    check(PubSignal.EVENT_ID, when(is_set(opts.event_id), required, equals(opts.event_id)))
    age_bound = years_before(now, opts.age_years) if is_set(opts.age_years) else now
    birth = PubSignal.BIRTH_DATE_UPPER_BOUND
    check(birth, when(is_set(opts.age_years), _date_rule(birth.path, before_date(age_bound))))
    citizenship = PubSignal.CITIZENSHIP
    check(citizenship, when(is_set(opts.citizenships), _text_rule(citizenship.path, required, in_set(opts.citizenships or ()))))
    address = encode_bytes(opts.address) if is_set(opts.address) else None
    check(PubSignal.EVENT_DATA, when(is_set(opts.address), required, equals(address)))

    errors.update(_check_identity_bounds(signals, opts))
    return ValidationReport(errors)


def _check_root(root: str, opts: VerifyOptions) -> str | None:
    if not is_set(opts.root_verifier):
        raise ConfigurationError("root verifier is not configured")
    blank = required(root)
    if blank:
        return blank
    try:
        opts.root_verifier.verify_root(root)
    except RootRejectedError as e:
        return e.message
    # InfrastructureError propagates untouched
    return None


def _check_identity_bounds(signals: Sequence[str], opts: VerifyOptions) -> dict[str, str]:
    # an unconfigured leg counts as passing, so only two failing legs fail the pair
    if not count_limit_set(opts.max_identities_count) or not is_set(opts.max_identity_creation_time):
        return {}
    counter_field = PubSignal.IDENTITY_COUNTER_UPPER_BOUND
    timestamp_field = PubSignal.TIMESTAMP_UPPER_BOUND
    counter = parse_decimal(signals[counter_field], counter_field.path)
    timestamp = parse_decimal(signals[timestamp_field], timestamp_field.path)
    legs = {
        counter_field.path: validate(counter, max_value(opts.max_identities_count)),
        timestamp_field.path: validate(timestamp, max_value(int(opts.max_identity_creation_time.timestamp()))),
    }
    if any(reason is None for reason in legs.values()):
        return {}
    logging.debug("Identity bounds failed: %s", legs)
    return legs


__all__ = ["ValidationReport", "check_shape", "validate_proof", "validate_signals", "years_before"]
