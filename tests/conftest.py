import pytest
from typing import AsyncGenerator

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import AsyncClient, ASGITransport

from jwt_signer.core.config import Settings
from jwt_signer.core.keys import parse_private_key
from jwt_signer.main import create_app

TEST_KID = "test-key-1"
TEST_SECRET = "s3cret-value"
TEST_ISSUER = "https://signer.example.com"
TEST_AUDIENCE = "https://api.example.com"

@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    # Key generation is slow, one key serves the whole session
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)

@pytest.fixture(scope="session")
def private_pem(rsa_private_key) -> str:
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode()

@pytest.fixture(scope="session")
def escaped_pem(private_pem) -> str:
    """PEM as it usually arrives from an environment variable."""
    return private_pem.strip().replace("\n", "\\n")

@pytest.fixture
def key_material(private_pem):
    return parse_private_key(private_pem, kid=TEST_KID)

@pytest.fixture
def make_settings(escaped_pem):
    def _make_settings(**overrides) -> Settings:
        values = {
            "PRIVATE_KEY": escaped_pem,
            "KEY_ID": TEST_KID,
            "DEFAULT_ISSUER": TEST_ISSUER,
            "DEFAULT_AUDIENCE": TEST_AUDIENCE,
            "SIGNING_SECRET": None,
            "RATE_LIMIT_MAX": 60,
            "RATE_LIMIT_WINDOW": 60,
        }
        values.update(overrides)
        # _env_file=None keeps a developer's .env out of the tests
        return Settings(_env_file=None, **values)

    return _make_settings

@pytest.fixture
def make_client(make_settings):
    """Factory returning (app, client context) for a given configuration."""
    def _make_client(**overrides):
        app = create_app(make_settings(**overrides))
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        return app, client

    return _make_client

@pytest.fixture
async def client(make_client) -> AsyncGenerator[AsyncClient, None]:
    _, c = make_client()
    async with c:
        yield c

@pytest.fixture
async def secured_client(make_client) -> AsyncGenerator[AsyncClient, None]:
    _, c = make_client(SIGNING_SECRET=TEST_SECRET)
    async with c:
        yield c
