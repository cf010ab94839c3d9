import base64
import hashlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from jwt_signer.core.config import Settings
from jwt_signer.core.exceptions import KeyMaterialError

logger = logging.getLogger(__name__)

ALGORITHM = "RS256"

def int_to_base64(value: int) -> str:
    """Convert an integer to a Base64URL-encoded string"""
    byte_length = max(1, (value.bit_length() + 7) // 8)
    raw = value.to_bytes(byte_length, byteorder="big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

def normalize_pem(pem: str) -> str:
    """
    Environment variables often carry PEM blocks on a single line with
    literal backslash-n sequences. Turn those back into real newlines.
    """
    pem = pem.strip()
    if "\\n" in pem:
        pem = pem.replace("\\r\\n", "\n").replace("\\n", "\n")
    return pem

def compute_jwk_thumbprint(jwk: Dict[str, Any]) -> str:
    """RFC 7638 SHA-256 thumbprint over the required RSA members."""
    canonical = json.dumps(
        {"e": jwk["e"], "kty": jwk["kty"], "n": jwk["n"]},
        separators=(",", ":"),
        sort_keys=True
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")

@dataclass(frozen=True)
class KeyMaterial:
    """
    The process signing key and its public JWK.
    Built once at startup and shared read-only by every request.
    """
    private_key: rsa.RSAPrivateKey = field(repr=False)
    kid: Optional[str]
    public_jwk: Dict[str, Any]
    thumbprint: str
    algorithm: str = ALGORITHM

    @property
    def key_thumbprint(self) -> str:
        # Verifiers fall back to the thumbprint when no kid is configured
        return self.kid or self.thumbprint

    def jwks(self) -> Dict[str, Any]:
        return {"keys": [dict(self.public_jwk)]}

def build_public_jwk(public_key: rsa.RSAPublicKey, kid: Optional[str]) -> Dict[str, Any]:
    public_numbers = public_key.public_numbers()
    return {
        "kty": "RSA",
        "n": int_to_base64(public_numbers.n),
        "e": int_to_base64(public_numbers.e),
        "use": "sig",
        "alg": ALGORITHM,
        "kid": kid
    }

def parse_private_key(pem: str, kid: Optional[str] = None, password: Optional[str] = None) -> KeyMaterial:
    """
    Parses a PEM private key and derives the public JWK.

    Raises:
        KeyMaterialError: If the PEM is empty, unparsable or not an RSA key.
    """
    if not pem or not pem.strip():
        raise KeyMaterialError("Private key is not configured")

    try:
        private_key = serialization.load_pem_private_key(
            normalize_pem(pem).encode("utf-8"),
            password=password.encode() if password else None
        )
    except (ValueError, TypeError) as e:
        raise KeyMaterialError(f"Private key could not be parsed: {e}") from e

    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise KeyMaterialError(f"{ALGORITHM} requires an RSA private key")

    kid = kid or None
    public_jwk = build_public_jwk(private_key.public_key(), kid)

    return KeyMaterial(
        private_key=private_key,
        kid=kid,
        public_jwk=public_jwk,
        thumbprint=compute_jwk_thumbprint(public_jwk)
    )

def load_key_material(settings: Settings) -> KeyMaterial:
    """
    Loads the signing key from settings.
    Must be called on application startup; a failure here stops the process.
    """
    pem = settings.PRIVATE_KEY
    if not pem and settings.PRIVATE_KEY_PATH:
        path = Path(settings.PRIVATE_KEY_PATH)
        try:
            pem = path.read_text()
        except OSError as e:
            raise KeyMaterialError(f"Private key file {path} could not be read: {e}") from e

    key_material = parse_private_key(pem, settings.KEY_ID, settings.PRIVATE_KEY_PASSWORD)
    logger.info(
        "Signing key loaded",
        extra={
            "alg": key_material.algorithm,
            "kid": key_material.kid,
            "key_thumbprint": key_material.thumbprint,
            "key_size": key_material.private_key.key_size
        }
    )
    return key_material
