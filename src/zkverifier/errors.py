"""Error taxonomy for proof verification.

Every error carries a chain of context prefixes. Layers that want to say
*where* a failure happened call :meth:`VerifierError.add_context` and re-raise
the same object, so callers can always dispatch on the exception type:

  * :class:`ShapeError`: proof or signal vector missing, wrong length or not decimal.
  * :class:`ValidationError`: one or more field checks failed (carries the report).
  * :class:`InfrastructureError`: a collaborator could not answer (registry down, no snarkjs).
  * :class:`CryptographicError`: the pairing check rejected the proof.
  * :class:`ConfigurationError`: the verifier could not be built.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .signals.validator import ValidationReport


class VerifierError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.context: list[str] = []

    def add_context(self, text: str) -> "VerifierError":
        self.context.insert(0, text)
        return self

    def __str__(self) -> str:
        return ": ".join([*self.context, self.message])


class ConfigurationError(VerifierError):
    pass


class UnknownProofTypeError(ConfigurationError):
    def __init__(self, proof_type: object):
        super().__init__(f"unknown proof type {proof_type!r}")
        self.proof_type = proof_type


class ShapeError(VerifierError):
    """Proof container or signal vector cannot be read at all."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__(format_errors(self.errors))
        self.add_context("failed to validate arguments")


class SignalFormatError(ShapeError):
    """A signal that must hold a decimal integer does not."""


class ValidationError(VerifierError):
    def __init__(self, report: "ValidationReport"):
        self.report = report
        super().__init__(str(report))

    @property
    def errors(self) -> dict[str, str]:
        return dict(self.report.items())


class InfrastructureError(VerifierError):
    pass


class CryptographicError(VerifierError):
    pass


class RootRejectedError(VerifierError):
    """Raised by root verifiers when the registry does not know the root."""


def format_errors(errors: dict[str, str]) -> str:
    """Render field errors the way downstream consumers match on them.

    Paths are sorted, each entry reads ``path: reason`` and the whole text
    ends with a single period.
    """
    if not errors:
        return ""
    return "; ".join(f"{path}: {errors[path]}" for path in sorted(errors)) + "."


__all__ = [
    "VerifierError",
    "ConfigurationError",
    "UnknownProofTypeError",
    "ShapeError",
    "SignalFormatError",
    "ValidationError",
    "InfrastructureError",
    "CryptographicError",
    "RootRejectedError",
    "format_errors",
]
