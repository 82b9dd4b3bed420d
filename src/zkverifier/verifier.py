from __future__ import annotations

import hmac
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

import pydantic

from .api.models import ZKProof
from .errors import (
    ConfigurationError,
    ShapeError,
    UnknownProofTypeError,
    ValidationError,
    VerifierError,
)
from .groth16 import Groth16Verifier, SnarkjsGroth16Verifier
from .policy.options import (
    VerifyOption,
    VerifyOptions,
    hash_external_id,
    is_set,
    merge_options,
)
from .settings import settings
from .signals.layout import EXTERNAL_ID_PATH
from .signals.validator import ValidationReport, validate_proof


class ProofType(str, Enum):
    PASSPORT = "passport"


class Verifier:
    """Validates passport proof signals against stored options, then runs the
    Groth16 check.

    The options and verification key are fixed at construction. Per-call
    options passed to :meth:`verify_proof` are merged into a fresh value, so
    one instance can serve concurrent callers.
    """

    def __init__(
        self,
        *options: VerifyOption,
        groth16: Groth16Verifier | None = None,
        base: VerifyOptions | None = None,
    ):
        opts = merge_options(base, *options)
        if not is_set(opts.root_verifier):
            raise ConfigurationError("root verifier is required")
        if not is_set(opts.verification_key):
            opts = opts.model_copy(update={"verification_key": _load_default_key()})
        self._opts = opts
        self._groth16 = groth16 or SnarkjsGroth16Verifier()
        logging.debug("Verifier configured with %s", ", ".join(opts.configured()))

    @property
    def options(self) -> VerifyOptions:
        return self._opts

    @property
    def verification_key(self) -> bytes:
        return self._opts.verification_key

    def with_options(self, *options: VerifyOption) -> "Verifier":
        """Return a new verifier whose base options are these options applied on top of ours."""
        return Verifier(*options, groth16=self._groth16, base=self._opts)

    def validate(self, proof: ZKProof | Mapping[str, Any] | None, *options: VerifyOption, now: datetime | None = None) -> ValidationReport:
        """Run the signal checks only and return the report (no pairing check)."""
        opts = merge_options(self._opts, *options)
        return validate_proof(_coerce_proof(proof), opts, now=now)

    def verify_proof(self, proof: ZKProof | Mapping[str, Any] | None, *options: VerifyOption, now: datetime | None = None) -> None:
        try:
            proof = _coerce_proof(proof)
            report = self.validate(proof, *options, now=now)
            if not report.ok:
                raise ValidationError(report)
        except VerifierError as e:
            e.add_context("failed to validate proof")
            raise

        try:
            self._groth16.verify_groth16(proof, self.verification_key)
        except VerifierError as e:
            e.add_context("failed to verify proof")
            raise
        logging.info("Proof verified (nullifier=%s)", proof.pub_signals[0])

    def verify_external_id(self, candidate: str) -> None:
        """Check ``candidate`` (a raw identifier) hashes to the configured external ID.

        Unlike the other options the external ID is required here: a verifier
        built without one rejects every candidate.
        """
        expected = self._opts.external_id
        if not is_set(expected):
            reason = "cannot be blank"
        elif not hmac.compare_digest(expected, hash_external_id(candidate)):
            reason = "must be a valid value"
        else:
            return None
        err = ValidationError(ValidationReport({EXTERNAL_ID_PATH: reason}))
        err.add_context("failed to validate arguments")
        raise err


def _coerce_proof(proof: ZKProof | Mapping[str, Any] | None) -> ZKProof | None:
    if proof is None or isinstance(proof, ZKProof):
        return proof
    try:
        return ZKProof.model_validate(proof)
    except pydantic.ValidationError as e:
        raise ShapeError({"zk_proof": "must be a valid proof object"}) from e


def _load_default_key() -> bytes:
    path = settings.verification_key_path
    if path is None:
        raise ConfigurationError("verification key is required (option or ZKV_VERIFICATION_KEY_PATH)")
    try:
        return path.read_bytes()
    except OSError as e:
        raise ConfigurationError(f"failed to read verification key {path}: {e}") from e


_FACTORIES = {
    ProofType.PASSPORT: Verifier,
}


def new_verifier(proof_type: ProofType | str, *options: VerifyOption, **kwargs: Any) -> Verifier:
    try:
        factory = _FACTORIES[ProofType(proof_type)]
    except ValueError as e:
        raise UnknownProofTypeError(proof_type) from e
    return factory(*options, **kwargs)


__all__ = ["ProofType", "Verifier", "new_verifier"]
