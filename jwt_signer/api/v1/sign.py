from typing import Optional

from fastapi import APIRouter, Depends, Response

from jwt_signer.api import deps
from jwt_signer.schemas.sign import SignRequest, SignResponse, ErrorResponse
from jwt_signer.services.claims import ClaimBuilder
from jwt_signer.services.signer import TokenSigner

router = APIRouter()

@router.post(
    "/sign-jwt",
    response_model=SignResponse,
    dependencies=[Depends(deps.enforce_rate_limit), Depends(deps.require_signing_secret)],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    }
)
async def sign_jwt(
    response: Response,
    sign_in: Optional[SignRequest] = None,
    builder: ClaimBuilder = Depends(deps.get_claim_builder),
    signer: TokenSigner = Depends(deps.get_token_signer)
):
    """
    Sign a claim payload with the service key.
    """
    # An empty POST signs with every default
    if sign_in is None:
        sign_in = SignRequest()

    # Shape errors raise ClientInputError here, before any signing happens
    claim_set = builder.build(sign_in)
    signed = signer.sign(claim_set)

    response.headers["Cache-Control"] = "no-store"
    return SignResponse(
        token=signed.token,
        alg=signed.alg,
        kid=signed.kid,
        key_thumbprint=signed.key_thumbprint,
        expires_in_hint=signed.expires_in_hint
    )
