#!/usr/bin/env python3
"""
Generate an RSA signing key for the JWT signer.
Prints the PKCS#8 PEM either as-is or escaped onto one line for .env files.
"""
import argparse
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

def generate_private_pem(key_size: int = 2048) -> str:
    key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode()

def main():
    parser = argparse.ArgumentParser(description="Generate an RS256 signing key")
    parser.add_argument("--key-size", type=int, default=2048, help="RSA modulus size in bits")
    parser.add_argument("--out", help="Write the PEM to this file (mode 600) instead of stdout")
    parser.add_argument("--env", action="store_true", help="Print as a single-line PRIVATE_KEY= entry")

    args = parser.parse_args()
    pem = generate_private_pem(args.key_size)

    if args.out:
        path = Path(args.out)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(pem)
        path.chmod(0o600)
        print(f"Private key written to {path}")
    elif args.env:
        escaped = pem.strip().replace("\n", "\\n")
        print(f'PRIVATE_KEY="{escaped}"')
    else:
        print(pem, end="")

if __name__ == "__main__":
    main()
