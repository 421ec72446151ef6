"""Tests for core data models."""
import base64
import json
from datetime import datetime, timedelta, timezone

from nutrimind.models.auth import (
    AuthResponse,
    Credential,
    UserDto,
    decode_jwt,
    jwt_expiry,
    unwrap_envelope,
)
from nutrimind.models.meal_plan import MealPlan


def make_jwt(claims):
    payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).decode().rstrip("=")
    return f"header.{payload}.signature"


class TestJwt:
    def test_decode(self):
        assert decode_jwt(make_jwt({"sub": "u1", "exp": 100})) == {"sub": "u1", "exp": 100}

    def test_decode_garbage(self):
        assert decode_jwt("not-a-jwt") is None
        assert decode_jwt("a.!!!.c") is None

    def test_expiry(self):
        assert jwt_expiry(make_jwt({"exp": 0})) == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert jwt_expiry(make_jwt({"sub": "x"})) is None


class TestCredential:
    def test_no_expiry_never_expired(self):
        assert not Credential(access_token="a").is_expired(3600)

    def test_is_expired_with_skew(self):
        soon = datetime.now(timezone.utc) + timedelta(seconds=10)
        cred = Credential(access_token="a", expires_at=soon)
        assert not cred.is_expired(0)
        assert cred.is_expired(30)

    def test_naive_expiry_read_as_utc(self):
        naive = datetime(2030, 1, 1, 12, 0)
        cred = Credential(access_token="a", expires_at=naive)
        assert cred.expires_at == datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert not cred.is_expired(30)

    def test_naive_past_expiry_is_expired(self):
        naive_past = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=5)
        assert Credential(access_token="a", expires_at=naive_past).is_expired()

    def test_bearer(self):
        assert Credential(access_token="abc").bearer == "Bearer abc"

    def test_from_auth_response_uses_expires_in(self):
        resp = AuthResponse(token="t", refreshToken="r", expiresIn=3600)
        cred = Credential.from_auth_response(resp)
        assert cred.refresh_token == "r"
        remaining = cred.expires_at - datetime.now(timezone.utc)
        assert timedelta(seconds=3500) < remaining <= timedelta(seconds=3600)

    def test_from_auth_response_falls_back_to_jwt_and_previous(self):
        token = make_jwt({"exp": 2_000_000_000})
        previous = Credential(access_token="old", refresh_token="keep-me")
        cred = Credential.from_auth_response(AuthResponse(token=token), previous)
        assert cred.refresh_token == "keep-me"
        assert cred.expires_at == datetime.fromtimestamp(2_000_000_000, tz=timezone.utc)

    def test_json_round_trip_keeps_expiry(self):
        cred = Credential(
            access_token="a", refresh_token="r",
            expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
        )
        assert Credential.model_validate_json(cred.model_dump_json()) == cred


class TestAuthResponse:
    def test_parse_full(self):
        resp = AuthResponse.model_validate({
            "token": "t",
            "refreshToken": "r",
            "user": {"id": "1", "email": "a@b.c", "firstName": "Ada", "lastName": "L", "hasProfile": True},
        })
        assert resp.user.display_name == "Ada L"
        assert resp.user.hasProfile is True

    def test_display_name_falls_back_to_email(self):
        assert UserDto(id="1", email="a@b.c").display_name == "a@b.c"


class TestUnwrapEnvelope:
    def test_standard(self):
        assert unwrap_envelope({"success": True, "data": {"x": 1}}) == ({"x": 1}, True, None)

    def test_pascal_case(self):
        body = {"Success": False, "Message": "nope", "Data": None}
        assert unwrap_envelope(body) == (None, False, "nope")

    def test_bare_payload(self):
        assert unwrap_envelope({"id": "p1"}) == ({"id": "p1"}, True, None)
        assert unwrap_envelope([1, 2]) == ([1, 2], True, None)
        assert unwrap_envelope(None) == (None, True, None)


class TestMealPlan:
    def test_total_meals_and_extra_fields(self):
        plan = MealPlan.model_validate({
            "id": "p1",
            "weekIdentifier": "2025-W09",
            "generatedBy": "model-x",
            "days": [
                {"date": "2025-02-24", "meals": [
                    {"mealType": "Breakfast", "recipe": {"title": "Oats"}},
                    {"mealType": "Dinner", "recipe": {"title": "Curry", "nutrition": {"calories": 640}}},
                ]},
                {"date": "2025-02-25", "meals": []},
            ],
        })
        assert plan.total_meals == 2
        assert plan.days[0].meals[1].recipe.nutrition.calories == 640
        assert plan.model_extra["generatedBy"] == "model-x"
