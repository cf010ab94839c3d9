#!/usr/bin/env python3
"""
Verify a token against the JWKS published by a running signer.
"""
import argparse
import json
import sys

import httpx
import jwt

def main():
    parser = argparse.ArgumentParser(description="Verify a signed JWT against the service JWKS")
    parser.add_argument("token", help="Compact JWT to verify")
    parser.add_argument("--base-url", default="http://localhost:3000")
    parser.add_argument("--audience", help="Expected aud claim")
    parser.add_argument("--issuer", help="Expected iss claim")

    args = parser.parse_args()

    response = httpx.get(f"{args.base_url}/.well-known/jwks.json", timeout=10.0)
    response.raise_for_status()
    jwk_set = jwt.PyJWKSet.from_dict(response.json())

    header = jwt.get_unverified_header(args.token)
    kid = header.get("kid")
    keys = [k for k in jwk_set.keys if k.key_id == kid] or jwk_set.keys

    options = {"verify_aud": args.audience is not None}
    try:
        claims = jwt.decode(
            args.token,
            keys[0].key,
            algorithms=["RS256"],
            audience=args.audience,
            issuer=args.issuer,
            options=options
        )
    except jwt.PyJWTError as e:
        print(f"Token invalid: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps({"header": header, "claims": claims}, indent=2))

if __name__ == "__main__":
    main()
