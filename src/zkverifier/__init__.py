"""zkverifier: policy checks and Groth16 verification for passport identity proofs.

Build a verifier from option mutators, then verify proofs with optional
per-call overrides:

    verifier = Verifier(
        with_root_verifier(HttpRootVerifier("https://registry.example")),
        with_verification_key_file("passport_vk.json"),
        with_age_above(18),
    )
    verifier.verify_proof(proof, with_event_id("1234"))
"""
from .errors import (  # noqa: F401
    ConfigurationError,
    CryptographicError,
    InfrastructureError,
    RootRejectedError,
    ShapeError,
    SignalFormatError,
    UnknownProofTypeError,
    ValidationError,
    VerifierError,
)
from .policy.options import (  # noqa: F401
    UNBOUNDED,
    UNSET,
    VerifyOptions,
    merge_options,
    with_address,
    with_age_above,
    with_citizenships,
    with_event_id,
    with_external_id,
    with_identities_count,
    with_identity_creation_time,
    with_root_verifier,
    with_verification_key,
    with_verification_key_file,
)
from .roots import HttpRootVerifier, RootVerifier, StaticRootVerifier  # noqa: F401
from .verifier import ProofType, Verifier, new_verifier  # noqa: F401
