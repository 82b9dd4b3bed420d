"""Groth16 pairing check.

The check itself is delegated; this module only defines the capability and a
subprocess adapter around ``snarkjs groth16 verify``. Only an explicit
"Invalid proof" verdict is a cryptographic rejection; any other failure of the
tool is an infrastructure problem.
"""
from __future__ import annotations

import json
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from .api.models import ZKProof
from .errors import CryptographicError, InfrastructureError
from .settings import settings


@runtime_checkable
class Groth16Verifier(Protocol):
    def verify_groth16(self, proof: ZKProof, verification_key: bytes) -> None: ...


class SnarkjsGroth16Verifier:
    def __init__(self, binary: str | None = None, timeout: float | None = None):
        self.binary = binary or settings.snarkjs_bin
        self.timeout = timeout if timeout is not None else settings.snarkjs_timeout_seconds

    def verify_groth16(self, proof: ZKProof, verification_key: bytes) -> None:
        with tempfile.TemporaryDirectory(prefix="zkv-") as tmp:
            work = Path(tmp)
            vk_file = work / "verification_key.json"
            public_file = work / "public.json"
            proof_file = work / "proof.json"
            vk_file.write_bytes(verification_key)
            public_file.write_text(json.dumps(proof.pub_signals or []))
            proof_file.write_text(proof.proof.model_dump_json(by_alias=True, exclude_none=True) if proof.proof else "{}")
            cmd = [self.binary, "groth16", "verify", str(vk_file), str(public_file), str(proof_file)]
            try:
                proc = subprocess.run(  # noqa: S603 static args, no shell
                    cmd, capture_output=True, text=True, timeout=self.timeout
                )
            except FileNotFoundError as e:
                raise InfrastructureError(f"snarkjs not found: {self.binary}") from e
            except subprocess.TimeoutExpired as e:
                raise InfrastructureError(f"snarkjs timed out after {self.timeout}s") from e
        output = (proc.stdout or "") + (proc.stderr or "")
        logging.debug("snarkjs exit=%s output=%s", proc.returncode, output.strip())
        if proc.returncode == 0 and "OK" in output:
            return None
        if "Invalid proof" in output:
            raise CryptographicError("groth16 verification failed")
        raise InfrastructureError(f"snarkjs failed with exit status {proc.returncode}")


__all__ = ["Groth16Verifier", "SnarkjsGroth16Verifier"]
