from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .errors import CryptographicError, InfrastructureError, ValidationError, VerifierError
from .policy.options import (
    hash_external_id,
    options_from_overrides,
    with_root_verifier,
    with_verification_key_file,
)
from .roots import HttpRootVerifier, StaticRootVerifier
from .settings import settings
from .verifier import ProofType, new_verifier

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_USAGE = 2
EXIT_UNAVAILABLE = 3


def _exit_code(err: VerifierError) -> int:
    if isinstance(err, (ValidationError, CryptographicError)):
        return EXIT_REJECTED
    if isinstance(err, InfrastructureError):
        return EXIT_UNAVAILABLE
    return EXIT_USAGE


def cmd_verify(args: argparse.Namespace) -> int:
    proof_path = Path(args.proof)
    if not proof_path.exists():
        print(f"Proof not found: {proof_path}", file=sys.stderr)
        return EXIT_USAGE
    try:
        proof = json.loads(proof_path.read_text())
    except json.JSONDecodeError as e:
        print(f"Proof is not valid JSON: {e}", file=sys.stderr)
        return EXIT_USAGE

    if args.root_allow:
        root_verifier = StaticRootVerifier(args.root_allow)
    elif settings.registry_url:
        root_verifier = HttpRootVerifier()
    else:
        print("Provide --root-allow or set ZKV_REGISTRY_URL", file=sys.stderr)
        return EXIT_USAGE

    options = [with_root_verifier(root_verifier)]
    try:
        if args.vk:
            options.append(with_verification_key_file(args.vk))
        options.extend(options_from_overrides({
            "event_id": args.event_id,
            "age_above": args.age,
            "citizenships": args.citizenship,
            "address_hex": args.address_hex,
            "identities_count": args.identities_count,
            "identity_creation_time": args.identity_creation_time,
        }))
    except (OSError, ValueError) as e:
        print(f"Invalid option: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        verifier = new_verifier(args.type, *options)
        verifier.verify_proof(proof)
    except VerifierError as e:
        print(f"FAIL: {e}", file=sys.stderr)
        return _exit_code(e)
    print("OK: proof verified")
    return EXIT_OK


def cmd_hash_id(args: argparse.Namespace) -> int:
    print(hash_external_id(args.value))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="zkv",
        description="Passport proof verification utilities",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_verify = sub.add_parser("verify", help="Validate public signals and verify a proof")
    p_verify.add_argument("--proof", required=True, help="Proof JSON ({proof, pub_signals})")
    p_verify.add_argument("--type", default=ProofType.PASSPORT.value, help="Proof type (default: passport)")
    p_verify.add_argument("--vk", help="Verification key JSON (default: ZKV_VERIFICATION_KEY_PATH)")
    p_verify.add_argument("--root-allow", action="append", metavar="ROOT", help="Accepted identity state root; repeatable")
    p_verify.add_argument("--event-id", help="Expected event id (decimal)")
    p_verify.add_argument("--age", type=int, help="Minimum age in years")
    p_verify.add_argument("--citizenship", action="append", metavar="CODE", help="Allowed alpha-3 code; repeatable")
    p_verify.add_argument("--address-hex", help="Bound address bytes, hex encoded")
    p_verify.add_argument("--identities-count", type=int, help="Maximum identities count (-1 for unbounded)")
    p_verify.add_argument("--identity-creation-time", type=int, help="Latest identity creation time (unix seconds)")
    p_verify.set_defaults(func=cmd_verify)

    p_hash = sub.add_parser("hash-id", help="Print the external id digest for a raw identifier")
    p_hash.add_argument("value")
    p_hash.set_defaults(func=cmd_hash_id)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
