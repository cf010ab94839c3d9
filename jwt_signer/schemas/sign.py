from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Any, Union

class SignRequest(BaseModel):
    """
    Body of POST /sign-jwt.
    payload and header are left loosely typed so the claim builder can
    reject bad shapes with a descriptive message.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    payload: Any = Field(default_factory=dict)
    header: Any = Field(default_factory=dict)
    iss: Optional[str] = None
    aud: Optional[Union[str, List[str]]] = None
    sub: Optional[str] = None
    expires_in: Optional[str] = Field(default=None, alias="expiresIn")
    not_before: Optional[str] = Field(default=None, alias="notBefore")
    jti: Optional[str] = None

class SignResponse(BaseModel):
    token: str
    token_type: str = "JWT"
    alg: str
    kid: Optional[str]
    key_thumbprint: str
    expires_in_hint: str

class ErrorResponse(BaseModel):
    error: str

class HealthResponse(BaseModel):
    status: str = "ok"
    ts: int
