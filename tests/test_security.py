"""
DevConnect Backend - Password Hashing & Token Tests
=====================================================
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from devconnect.config import Settings
from devconnect.exceptions import UnauthenticatedError
from devconnect.security import PasswordHasher, TokenCodec


class TestPasswordHasher:

    def setup_method(self):
        self.hasher = PasswordHasher(Settings(_env_file=None, bcrypt_rounds=4))

    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = self.hasher.hash("Str0ng!Pass")
        assert hashed != "Str0ng!Pass"
        assert hashed.startswith("$2")
        assert self.hasher.verify("Str0ng!Pass", hashed)

    def test_wrong_password_fails(self):
        hashed = self.hasher.hash("Str0ng!Pass")
        assert not self.hasher.verify("Wr0ng!Pass", hashed)

    def test_malformed_hash_fails_closed(self):
        assert not self.hasher.verify("Str0ng!Pass", "not-a-bcrypt-hash")


class TestTokenCodec:

    def setup_method(self):
        self.settings = Settings(_env_file=None, jwt_secret="unit-test-secret")
        self.codec = TokenCodec(self.settings)

    def test_round_trip_carries_user_id(self):
        user_id = uuid.uuid4()
        token = self.codec.issue(user_id)
        assert self.codec.decode(token) == user_id

    def test_claim_name_is_user_id(self):
        user_id = uuid.uuid4()
        payload = jwt.decode(self.codec.issue(user_id), "unit-test-secret", algorithms=["HS256"])
        assert payload["userId"] == str(user_id)
        assert "exp" in payload

    def test_foreign_signature_rejected(self):
        forged = jwt.encode({"userId": str(uuid.uuid4())}, "other-secret", algorithm="HS256")
        with pytest.raises(UnauthenticatedError):
            self.codec.decode(forged)

    def test_expired_token_rejected(self):
        expired = jwt.encode(
            {"userId": str(uuid.uuid4()), "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            "unit-test-secret",
            algorithm="HS256",
        )
        with pytest.raises(UnauthenticatedError):
            self.codec.decode(expired)

    @pytest.mark.parametrize("claims", [{}, {"userId": ""}, {"userId": "not-a-uuid"}])
    def test_missing_or_malformed_user_id_rejected(self, claims):
        token = jwt.encode(claims, "unit-test-secret", algorithm="HS256")
        with pytest.raises(UnauthenticatedError):
            self.codec.decode(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(UnauthenticatedError):
            self.codec.decode("definitely.not.a-jwt")
