import hmac
from fastapi import Depends, Request, Response

from jwt_signer.core.config import Settings
from jwt_signer.core.exceptions import UnauthorizedError
from jwt_signer.core.keys import KeyMaterial
from jwt_signer.services.claims import ClaimBuilder
from jwt_signer.services.signer import TokenSigner
from jwt_signer.utils.rate_limiter import RateLimiter

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_key_material(request: Request) -> KeyMaterial:
    return request.app.state.key_material

def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter

def get_claim_builder(
    key_material: KeyMaterial = Depends(get_key_material),
    settings: Settings = Depends(get_settings)
) -> ClaimBuilder:
    return ClaimBuilder(
        key_material,
        default_issuer=settings.DEFAULT_ISSUER,
        default_audience=settings.DEFAULT_AUDIENCE,
        default_expires_in=settings.DEFAULT_EXPIRES_IN
    )

def get_token_signer(request: Request) -> TokenSigner:
    return request.app.state.token_signer

def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"

async def enforce_rate_limit(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_rate_limiter)
) -> None:
    """
    Sliding one-minute window per client address.
    Runs before the secret check so failed secret attempts count too.
    """
    request.state.rate_limit_headers = await limiter.limit(
        client_address(request),
        "sign-jwt",
        settings.RATE_LIMIT_MAX,
        settings.RATE_LIMIT_WINDOW,
        response
    )

async def require_signing_secret(
    request: Request,
    settings: Settings = Depends(get_settings)
) -> None:
    """
    Checks the shared secret header when a secret is configured.
    With no secret configured the signing endpoint is open.

    Raises:
        UnauthorizedError: If the header is missing or does not match.
    """
    expected = settings.SIGNING_SECRET
    if not expected:
        return

    provided = request.headers.get(settings.SIGNING_SECRET_HEADER)
    if provided is None or not hmac.compare_digest(provided.encode(), expected.encode()):
        raise UnauthorizedError()
