import logging
import time
from dataclasses import dataclass
from typing import Optional, Callable

import jwt

from jwt_signer.core.exceptions import SigningError
from jwt_signer.core.keys import KeyMaterial
from jwt_signer.services.claims import ClaimSet
from jwt_signer.utils.durations import parse_duration

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class SignedToken:
    token: str
    alg: str
    kid: Optional[str]
    key_thumbprint: str
    expires_in_hint: str
    iat: int
    exp: int

class TokenSigner:
    """
    Signs claim sets with the process key.
    """

    def __init__(self, key_material: KeyMaterial, clock: Callable[[], float] = time.time):
        self.key_material = key_material
        self.clock = clock

    def sign(self, claim_set: ClaimSet) -> SignedToken:
        """
        Resolves iat/exp/nbf against the current time and signs with RS256.

        Raises:
            SigningError: On any failure. Details are logged, never returned.
        """
        try:
            iat = int(self.clock())
            claims = dict(claim_set.claims)
            claims["iat"] = iat
            claims["exp"] = iat + parse_duration(claim_set.expires_in)
            if claim_set.not_before is not None:
                claims["nbf"] = iat + parse_duration(claim_set.not_before)

            # The library picks the algorithm from header["alg"] when present,
            # so alg only ever travels through the algorithm argument.
            headers = {k: v for k, v in claim_set.header.items() if k != "alg"}

            token = jwt.encode(
                claims,
                self.key_material.private_key,
                algorithm=self.key_material.algorithm,
                headers=headers
            )
        except Exception as e:
            logger.exception(
                "Token signing failed",
                extra={"kid": self.key_material.kid, "error_type": type(e).__name__}
            )
            raise SigningError() from e

        logger.info(
            "Token signed",
            extra={
                "kid": self.key_material.kid,
                "sub": claims.get("sub"),
                "jti": claims.get("jti"),
                "exp": claims["exp"]
            }
        )

        return SignedToken(
            token=token,
            alg=self.key_material.algorithm,
            kid=self.key_material.kid,
            key_thumbprint=self.key_material.key_thumbprint,
            expires_in_hint=claim_set.expires_in,
            iat=iat,
            exp=claims["exp"]
        )
