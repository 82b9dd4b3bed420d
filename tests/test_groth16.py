import json
import subprocess
from pathlib import Path

import pytest

from proofs import make_proof
from zkverifier import groth16
from zkverifier.errors import CryptographicError, InfrastructureError
from zkverifier.groth16 import Groth16Verifier, SnarkjsGroth16Verifier


class _Run:
    def __init__(self, returncode=0, stdout="", exc=None):
        self.returncode = returncode
        self.stdout = stdout
        self.exc = exc
        self.cmd = None
        self.files: dict[str, str] = {}

    def __call__(self, cmd, capture_output, text, timeout):
        self.cmd = cmd
        for arg in cmd[3:]:
            self.files[Path(arg).name] = Path(arg).read_text()
        if self.exc:
            raise self.exc
        return subprocess.CompletedProcess(cmd, self.returncode, stdout=self.stdout, stderr="")


def test_snarkjs_ok(monkeypatch):
    run = _Run(stdout="[INFO]  snarkJS: OK!\n")
    monkeypatch.setattr(groth16.subprocess, "run", run)
    v = SnarkjsGroth16Verifier(binary="snarkjs", timeout=5)
    assert isinstance(v, Groth16Verifier)
    proof = make_proof()
    v.verify_groth16(proof, b'{"protocol": "groth16"}')
    assert run.cmd[:3] == ["snarkjs", "groth16", "verify"]
    assert json.loads(run.files["public.json"]) == proof.pub_signals
    assert json.loads(run.files["proof.json"])["pi_a"] == proof.proof.a
    assert run.files["verification_key.json"] == '{"protocol": "groth16"}'


def test_snarkjs_invalid_proof(monkeypatch):
    monkeypatch.setattr(groth16.subprocess, "run", _Run(returncode=1, stdout="[ERROR] snarkJS: Invalid proof\n"))
    with pytest.raises(CryptographicError):
        SnarkjsGroth16Verifier().verify_groth16(make_proof(), b"{}")


def test_snarkjs_missing_binary(monkeypatch):
    monkeypatch.setattr(groth16.subprocess, "run", _Run(exc=FileNotFoundError("snarkjs")))
    with pytest.raises(InfrastructureError):
        SnarkjsGroth16Verifier(binary="/nonexistent/snarkjs").verify_groth16(make_proof(), b"{}")


def test_snarkjs_timeout(monkeypatch):
    monkeypatch.setattr(groth16.subprocess, "run", _Run(exc=subprocess.TimeoutExpired("snarkjs", 1)))
    with pytest.raises(InfrastructureError):
        SnarkjsGroth16Verifier(timeout=1).verify_groth16(make_proof(), b"{}")


def test_snarkjs_crash_is_infrastructure(monkeypatch):
    crash = _Run(returncode=1, stdout="[ERROR] snarkJS: Error: Unexpected end of JSON input\n")
    monkeypatch.setattr(groth16.subprocess, "run", crash)
    with pytest.raises(InfrastructureError) as exc:
        SnarkjsGroth16Verifier().verify_groth16(make_proof(), b"not json")
    assert not isinstance(exc.value, CryptographicError)
    assert "exit status 1" in str(exc.value)
