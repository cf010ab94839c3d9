import pytest

from jwt_signer.core.exceptions import ClientInputError
from jwt_signer.core.keys import parse_private_key
from jwt_signer.schemas.sign import SignRequest
from jwt_signer.services.claims import ClaimBuilder

@pytest.fixture
def builder(key_material):
    return ClaimBuilder(
        key_material,
        default_issuer="https://issuer.example.com",
        default_audience="default-aud"
    )

def make_request(**fields) -> SignRequest:
    return SignRequest.model_validate(fields)

class TestClaims:

    def test_defaults_applied(self, builder):
        claim_set = builder.build(make_request())
        assert claim_set.claims == {"iss": "https://issuer.example.com", "aud": "default-aud"}
        assert claim_set.expires_in == "3600s"
        assert claim_set.not_before is None

    def test_overrides_win_over_defaults(self, builder):
        claim_set = builder.build(make_request(iss="other", aud=["a", "b"], sub="svc", jti="id-1"))
        assert claim_set.claims["iss"] == "other"
        assert claim_set.claims["aud"] == ["a", "b"]
        assert claim_set.claims["sub"] == "svc"
        assert claim_set.claims["jti"] == "id-1"

    def test_optional_claims_are_omitted(self, builder):
        claims = builder.build(make_request(sub="", jti=None)).claims
        assert "sub" not in claims
        assert "jti" not in claims
        assert "nbf" not in claims

    def test_iss_aud_omitted_without_defaults(self, key_material):
        claims = ClaimBuilder(key_material).build(make_request(payload={"role": "reader"})).claims
        assert claims == {"role": "reader"}

    def test_payload_merged_under_standard_claims(self, builder):
        claim_set = builder.build(make_request(payload={"scope": "read", "iss": "spoofed"}, sub="svc"))
        assert claim_set.claims["scope"] == "read"
        assert claim_set.claims["iss"] == "https://issuer.example.com"

    def test_payload_sub_kept_when_not_overridden(self, builder):
        claims = builder.build(make_request(payload={"sub": "from-payload"})).claims
        assert claims["sub"] == "from-payload"

    def test_null_payload_treated_as_empty(self, builder):
        assert builder.build(make_request(payload=None)).claims["aud"] == "default-aud"

    def test_durations_passed_through(self, builder):
        claim_set = builder.build(make_request(expiresIn="15m", notBefore="10s"))
        assert claim_set.expires_in == "15m"
        assert claim_set.not_before == "10s"

    def test_payload_input_not_mutated(self, builder):
        payload = {"a": 1}
        builder.build(make_request(payload=payload, sub="x"))
        assert payload == {"a": 1}

class TestValidation:

    def test_array_payload_rejected(self, builder):
        with pytest.raises(ClientInputError, match="not an array"):
            builder.build(make_request(payload=[1, 2, 3]))

    @pytest.mark.parametrize("payload", ["string", 42, True])
    def test_scalar_payload_rejected(self, builder, payload):
        with pytest.raises(ClientInputError, match="payload must be a JSON object"):
            builder.build(make_request(payload=payload))

    def test_time_claims_dropped_from_payload(self, builder):
        claims = builder.build(make_request(payload={"nbf": "garbage", "iat": 0, "exp": 1, "x": 1})).claims
        assert "nbf" not in claims
        assert "iat" not in claims
        assert "exp" not in claims
        assert claims["x"] == 1

    @pytest.mark.parametrize("payload", [{"sub": 123}, {"jti": 7}, {"iss": None}])
    def test_registered_claims_must_be_strings(self, key_material, payload):
        with pytest.raises(ClientInputError, match="must be a string"):
            ClaimBuilder(key_material).build(make_request(payload=payload))

    @pytest.mark.parametrize("aud", [5, ["a", 1], {"a": 1}])
    def test_audience_shape_checked(self, key_material, aud):
        with pytest.raises(ClientInputError, match="aud"):
            ClaimBuilder(key_material).build(make_request(payload={"aud": aud}))

    def test_audience_list_of_strings_accepted(self, key_material):
        claims = ClaimBuilder(key_material).build(make_request(payload={"aud": ["a", "b"]})).claims
        assert claims["aud"] == ["a", "b"]

    def test_array_header_rejected(self, builder):
        with pytest.raises(ClientInputError, match="header"):
            builder.build(make_request(header=["typ"]))

class TestHeader:

    def test_default_header(self, builder):
        header = builder.build(make_request()).header
        assert header == {"typ": "JWT", "alg": "RS256", "kid": "test-key-1"}

    def test_caller_can_set_typ_and_cty(self, builder):
        header = builder.build(make_request(header={"typ": "at+jwt", "cty": "json"})).header
        assert header["typ"] == "at+jwt"
        assert header["cty"] == "json"

    def test_alg_and_kid_are_forced(self, builder):
        claim_set = builder.build(make_request(header={"alg": "none", "kid": "attacker"}))
        assert claim_set.header["alg"] == "RS256"
        assert claim_set.header["kid"] == "test-key-1"

    def test_unknown_header_fields_dropped(self, builder):
        claim_set = builder.build(make_request(header={"jku": "https://evil.example", "x5u": "u", "typ": "JWT"}))
        assert "jku" not in claim_set.header
        assert "x5u" not in claim_set.header
        assert sorted(claim_set.removed_header_fields) == ["jku", "x5u"]

    def test_kid_absent_when_unconfigured(self, private_pem):
        builder = ClaimBuilder(parse_private_key(private_pem))
        header = builder.build(make_request(header={"kid": "attacker"})).header
        assert "kid" not in header
        assert header["alg"] == "RS256"
