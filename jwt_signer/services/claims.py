import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Union, List

from jwt_signer.core.exceptions import ClientInputError
from jwt_signer.core.keys import KeyMaterial
from jwt_signer.schemas.sign import SignRequest

logger = logging.getLogger(__name__)

# Header fields a caller is allowed to set. alg and kid are always forced.
ALLOWED_HEADER_FIELDS = frozenset({"typ", "cty"})
DEFAULT_HEADER = {"typ": "JWT"}
# Resolved by the signer from the request durations, never taken from payload
TIME_CLAIMS = frozenset({"iat", "exp", "nbf"})
STRING_CLAIMS = ("iss", "sub", "jti")

@dataclass
class ClaimSet:
    """Claims and header ready for signing. Time claims are resolved by the signer."""
    claims: Dict[str, Any]
    header: Dict[str, Any]
    expires_in: str
    not_before: Optional[str] = None
    removed_header_fields: List[str] = field(default_factory=list)

def _present(value: Any) -> bool:
    return value not in (None, "", [])

class ClaimBuilder:
    """
    Turns a sign request into a canonical claim set and protected header.

    Caller input is merged through an allow-list: payload fields become
    custom claims, standard claims are set on top of them, and the header
    only accepts ALLOWED_HEADER_FIELDS before alg/kid are forced.
    """

    def __init__(
        self,
        key_material: KeyMaterial,
        default_issuer: Optional[str] = None,
        default_audience: Optional[Union[str, List[str]]] = None,
        default_expires_in: str = "3600s"
    ):
        self.key_material = key_material
        self.default_issuer = default_issuer
        self.default_audience = default_audience
        self.default_expires_in = default_expires_in

    def build(self, request: SignRequest) -> ClaimSet:
        payload = self._require_object(request.payload, "payload")
        caller_header = self._require_object(request.header, "header")

        claims = {k: v for k, v in payload.items() if k not in TIME_CLAIMS}

        # 1. Issuer / audience fall back to the configured defaults
        iss = request.iss if _present(request.iss) else self.default_issuer
        if _present(iss):
            claims["iss"] = iss

        aud = request.aud if _present(request.aud) else self.default_audience
        if _present(aud):
            claims["aud"] = aud

        # 2. Optional claims are omitted entirely, never set to null
        if _present(request.sub):
            claims["sub"] = request.sub
        if _present(request.jti):
            claims["jti"] = request.jti

        self._check_registered_claims(claims)

        header, removed = self._build_header(caller_header)

        return ClaimSet(
            claims=claims,
            header=header,
            expires_in=request.expires_in if _present(request.expires_in) else self.default_expires_in,
            not_before=request.not_before if _present(request.not_before) else None,
            removed_header_fields=removed
        )

    def _build_header(self, caller_header: Dict[str, Any]):
        header = dict(DEFAULT_HEADER)
        removed = []
        for name, value in caller_header.items():
            if name in ALLOWED_HEADER_FIELDS:
                header[name] = value
            else:
                removed.append(name)

        if removed:
            logger.debug("Ignoring caller header fields", extra={"fields": sorted(removed)})

        # Forced fields are applied last so nothing above can override them
        header["alg"] = self.key_material.algorithm
        if self.key_material.kid:
            header["kid"] = self.key_material.kid
        else:
            header.pop("kid", None)

        return header, removed

    @staticmethod
    def _check_registered_claims(claims: Dict[str, Any]):
        # Payload values for registered claims must still verify with standard libraries
        for name in STRING_CLAIMS:
            if name in claims and not isinstance(claims[name], str):
                raise ClientInputError(f"{name} must be a string")

        aud = claims.get("aud")
        if "aud" in claims and not (
            isinstance(aud, str) or (isinstance(aud, list) and all(isinstance(a, str) for a in aud))
        ):
            raise ClientInputError("aud must be a string or a list of strings")

    @staticmethod
    def _require_object(value: Any, name: str) -> Dict[str, Any]:
        if value is None:
            return {}
        if isinstance(value, list):
            raise ClientInputError(f"{name} must be a JSON object, not an array")
        if not isinstance(value, dict):
            raise ClientInputError(f"{name} must be a JSON object")
        return value
