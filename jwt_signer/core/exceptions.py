class KeyMaterialError(Exception):
    """Signing key is missing or cannot be parsed. Fatal at startup."""
    pass

class SignerServiceError(Exception):
    """Base error rendered to clients as {"error": public_message}."""
    status_code = 500
    public_message = "internal_error"

    def __init__(self, message: str = None, headers: dict = None):
        super().__init__(message or self.public_message)
        self.headers = headers

    @property
    def error(self) -> str:
        return self.public_message

class ClientInputError(SignerServiceError):
    """Request body has the wrong shape."""
    status_code = 400

    @property
    def error(self) -> str:
        # Input errors are descriptive, everything else stays generic
        return str(self)

class UnauthorizedError(SignerServiceError):
    """Shared secret missing or incorrect."""
    status_code = 401
    public_message = "unauthorized"

class RateLimitExceededError(SignerServiceError):
    """Client exceeded its request quota."""
    status_code = 429
    public_message = "rate_limited"

class SigningError(SignerServiceError):
    """Token could not be signed."""
    status_code = 500
    public_message = "signing_failed"
