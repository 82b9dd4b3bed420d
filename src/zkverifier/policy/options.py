"""Verification options and the mutators that build them.

``VerifyOptions`` is a frozen model whose fields all start as :data:`UNSET`.
Each ``with_*`` function returns a mutator, a pure function from one
``VerifyOptions`` to the next. :func:`merge_options` folds mutators over a
base value field by field, so later mutators win only for the fields they
touch and the base is never modified.

    opts = merge_options(VerifyOptions(), with_age_above(18), with_citizenships("UKR"))
"""
from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable

from pydantic import BaseModel, ConfigDict


class _Unset:
    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Unset":
        return self

    def __deepcopy__(self, memo: dict) -> "_Unset":
        return self


UNSET: Any = _Unset()
# Identity count limit meaning "no restriction", distinct from a limit of 0
UNBOUNDED = -1


def is_set(value: Any) -> bool:
    return value is not UNSET


def count_limit_set(value: Any) -> bool:
    return is_set(value) and value != UNBOUNDED


class VerifyOptions(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # hex SHA-256 of the external identifier, never the raw value
    external_id: Any = UNSET
    # minimum age in whole years, resolved against "now" at validation time
    age_years: Any = UNSET
    citizenships: Any = UNSET  # frozenset of ISO 3166 alpha-3 codes
    address: Any = UNSET  # raw decoded address bytes
    event_id: Any = UNSET  # decimal string
    max_identities_count: Any = UNSET
    max_identity_creation_time: Any = UNSET  # aware datetime (UTC)
    root_verifier: Any = UNSET
    verification_key: Any = UNSET  # raw key file contents

    def configured(self) -> list[str]:
        return [name for name in type(self).model_fields if is_set(getattr(self, name))]


VerifyOption = Callable[[VerifyOptions], VerifyOptions]


def hash_external_id(identifier: str) -> str:
    return hashlib.sha256(identifier.encode("utf-8")).hexdigest()


def _setter(**update: Any) -> VerifyOption:
    def apply(opts: VerifyOptions) -> VerifyOptions:
        return opts.model_copy(update=update)
    return apply


def with_external_id(identifier: str) -> VerifyOption:
    """Bind proofs to an application identifier (email, account address, ...).

    Only the SHA-256 hex digest is kept.
    """
    return _setter(external_id=hash_external_id(identifier))


def with_age_above(years: int) -> VerifyOption:
    if years < 0:
        raise ValueError("age must be non-negative")
    return _setter(age_years=int(years))


def with_citizenships(*codes: str) -> VerifyOption:
    """Accept only these ISO 3166 alpha-3 codes; no codes lifts the restriction."""
    return _setter(citizenships=frozenset(c.upper() for c in codes) or UNSET)


def with_address(address: bytes) -> VerifyOption:
    """Expect the proof to be bound to ``address``, already decoded by the caller
    (e.g. a bech32 account decoded to base256 without its human-readable part)."""
    return _setter(address=bytes(address))


def with_event_id(identifier: str) -> VerifyOption:
    return _setter(event_id=identifier)


def with_identities_count(limit: int) -> VerifyOption:
    """Maximum number of identities the holder may have registered; pass
    :data:`UNBOUNDED` to lift the restriction."""
    if limit < 0 and limit != UNBOUNDED:
        raise ValueError("identities count must be non-negative or UNBOUNDED")
    return _setter(max_identities_count=int(limit))


def with_identity_creation_time(moment: datetime | int) -> VerifyOption:
    """Latest accepted identity creation time, as an aware datetime or Unix seconds."""
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        moment = moment.astimezone(timezone.utc)
    else:
        moment = datetime.fromtimestamp(int(moment), tz=timezone.utc)
    return _setter(max_identity_creation_time=moment)


def with_root_verifier(verifier: Any) -> VerifyOption:
    return _setter(root_verifier=verifier)


def with_verification_key(key: bytes) -> VerifyOption:
    return _setter(verification_key=bytes(key))


def with_verification_key_file(path: str | Path) -> VerifyOption:
    """Read the key eagerly so a missing file fails construction, not a proof."""
    return _setter(verification_key=Path(path).read_bytes())


def merge_options(base: VerifyOptions | None = None, *options: VerifyOption) -> VerifyOptions:
    opts = base if base is not None else VerifyOptions()
    for option in options:
        opts = option(opts)
    return opts


def options_from_overrides(overrides: dict[str, Any]) -> list[VerifyOption]:
    """Translate a plain mapping (HTTP body, CLI flags) into mutators.

    Keys: ``external_id``, ``age_above``, ``citizenships``, ``address_hex``,
    ``event_id``, ``identities_count``, ``identity_creation_time``. None values
    are skipped.
    """
    builders: dict[str, Callable[[Any], VerifyOption]] = {
        "external_id": with_external_id,
        "age_above": with_age_above,
        "citizenships": lambda codes: with_citizenships(*_as_list(codes)),
        "address_hex": lambda value: with_address(bytes.fromhex(value.removeprefix("0x"))),
        "event_id": with_event_id,
        "identities_count": with_identities_count,
        "identity_creation_time": with_identity_creation_time,
    }
    unknown = sorted(set(overrides) - set(builders))
    if unknown:
        raise ValueError(f"unknown override(s): {', '.join(unknown)}")
    return [builders[key](value) for key, value in overrides.items() if value is not None]


def _as_list(value: str | Iterable[str]) -> list[str]:
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return list(value)


__all__ = [
    "UNSET",
    "UNBOUNDED",
    "VerifyOptions",
    "VerifyOption",
    "is_set",
    "count_limit_set",
    "hash_external_id",
    "with_external_id",
    "with_age_above",
    "with_citizenships",
    "with_address",
    "with_event_id",
    "with_identities_count",
    "with_identity_creation_time",
    "with_root_verifier",
    "with_verification_key",
    "with_verification_key_file",
    "merge_options",
    "options_from_overrides",
]
