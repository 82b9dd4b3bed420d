from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from ..errors import (
    ConfigurationError,
    CryptographicError,
    InfrastructureError,
    ShapeError,
    ValidationError,
    VerifierError,
)
from ..policy.options import options_from_overrides, with_root_verifier
from ..roots import HttpRootVerifier
from ..settings import settings
from ..verifier import Verifier
from .models import ExternalIDRequest, VerificationResult, VerifyRequest

app = FastAPI(title="zkverifier")

# error kind -> (HTTP status, phase label)
_ERROR_STATUS: list[tuple[type[VerifierError], int, str]] = [
    (ShapeError, 400, "arguments"),
    (ValidationError, 422, "fields"),
    (InfrastructureError, 503, "infrastructure"),
    (CryptographicError, 401, "cryptographic"),
    (ConfigurationError, 500, "configuration"),
]


@lru_cache(maxsize=1)
def get_verifier() -> Verifier:
    """Process-wide verifier built from settings; override in tests."""
    return Verifier(with_root_verifier(HttpRootVerifier()))


def _error_response(err: VerifierError) -> JSONResponse:
    for kind, status, phase in _ERROR_STATUS:
        if isinstance(err, kind):
            break
    else:  # pragma: no cover - every VerifierError subclass is mapped
        status, phase = 500, "unknown"
    errors = getattr(err, "errors", {}) if status in (400, 422) else {}
    body = VerificationResult(verified=False, phase=phase, reason=str(err), errors=errors)
    return JSONResponse(status_code=status, content=body.model_dump())


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logging.error("Verifier is misconfigured: %s", exc)
    return _error_response(exc)


@app.get("/health")
@app.get("/healthz")  # alias for k8s style probes
def health():
    return {"status": "ok", "registry": settings.registry_url}


@app.post("/proofs/verify")
def verify_proof(req: VerifyRequest, verifier: Verifier = Depends(get_verifier)):
    try:
        overrides = options_from_overrides(req.overrides.as_dict())
    except ValueError as e:
        return _error_response(ShapeError({"overrides": str(e)}))
    try:
        verifier.verify_proof(req.proof, *overrides)
    except (InfrastructureError, ConfigurationError) as e:
        logging.exception("Proof verification could not complete")
        return _error_response(e)
    except VerifierError as e:
        logging.debug("Proof rejected: %s", e)
        return _error_response(e)
    return VerificationResult(verified=True)


@app.post("/external-id/verify")
def verify_external_id(req: ExternalIDRequest, verifier: Verifier = Depends(get_verifier)):
    try:
        verifier.verify_external_id(req.external_id)
    except ValidationError as e:
        return _error_response(e)
    return VerificationResult(verified=True)
