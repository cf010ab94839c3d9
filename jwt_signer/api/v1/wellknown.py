from fastapi import APIRouter, Depends, Response

from jwt_signer.api import deps
from jwt_signer.core.keys import KeyMaterial

router = APIRouter()

@router.get("/jwks.json")
async def jwks(
    response: Response,
    key_material: KeyMaterial = Depends(deps.get_key_material)
):
    """
    Serve the Public Key in JWK Set format.
    Used by verifiers to check token signatures offline.
    """
    response.headers["Cache-Control"] = "public, max-age=300"
    return key_material.jwks()
