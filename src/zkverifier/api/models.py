from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProofData(BaseModel):
    """Groth16 proof points as emitted by snarkjs / rapidsnark."""

    model_config = ConfigDict(populate_by_name=True)

    a: list[str] = Field(alias="pi_a")
    b: list[list[str]] = Field(alias="pi_b")
    c: list[str] = Field(alias="pi_c")
    protocol: str = "groth16"
    curve: str | None = None


class ZKProof(BaseModel):
    proof: ProofData | None = None
    pub_signals: list[str] | None = None


class VerifyOverrides(BaseModel):
    external_id: str | None = None
    age_above: int | None = None
    citizenships: list[str] | None = None
    address_hex: str | None = None
    event_id: str | None = None
    identities_count: int | None = None
    identity_creation_time: int | None = None  # unix seconds

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class VerifyRequest(BaseModel):
    proof: ZKProof
    overrides: VerifyOverrides = Field(default_factory=VerifyOverrides)


class ExternalIDRequest(BaseModel):
    external_id: str


class VerificationResult(BaseModel):
    verified: bool
    phase: str | None = None  # arguments | fields | infrastructure | cryptographic
    reason: str | None = None
    errors: dict[str, str] = Field(default_factory=dict)
