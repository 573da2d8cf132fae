"""
DevConnect Backend - User Service Tests
=========================================

What we test:
    ✅ Signup normalizes email and skills, hashes the password
    ✅ Duplicate email (any casing) is a conflict
    ✅ Login succeeds with the right password only
    ✅ Profile update applies allowed fields, rejects empty/unknown updates
    ✅ Feed pagination bounds and hasNext/hasPrev consistency
"""

import math
import uuid

import pytest

from devconnect.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from devconnect.schemas.user import SignupRequest


class TestSignup:

    @pytest.mark.asyncio
    async def test_signup_normalizes_and_hashes(self, make_user):
        user = await make_user(
            "Ada",
            email_id="Ada.Lovelace@DevConnect.io",
            skills=["Go", "go ", "RUST"],
        )

        assert user.email_id == "ada.lovelace@devconnect.io"
        assert user.skills == ["Go", "RUST"]
        assert user.password != "Str0ng!Pass"
        assert user.age == 18
        assert user.gender == "M"
        assert user.created_at is not None

    @pytest.mark.asyncio
    async def test_duplicate_email_any_case(self, make_user):
        await make_user("Ada", email_id="ada@devconnect.io")

        with pytest.raises(ConflictError, match="Email already registered"):
            await make_user("Ada", email_id="ADA@devconnect.io")

    @pytest.mark.asyncio
    async def test_weak_password_rejected(self, make_user):
        with pytest.raises(ValidationError):
            await make_user("Ada", password="password")

    @pytest.mark.asyncio
    async def test_profile_extras_validated(self, make_user):
        with pytest.raises(ValidationError):
            await make_user("Ada", age=12)


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_returns_token_for_user(self, db_session, user_service, make_user):
        ada = await make_user("Ada")

        user, token = await user_service.login(db_session, "ADA@devconnect.io", "Str0ng!Pass")

        assert user.id == ada.id
        assert user_service.tokens.decode(token) == ada.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, db_session, user_service, make_user):
        await make_user("Ada")

        with pytest.raises(NotFoundError, match="Invalid email or password"):
            await user_service.login(db_session, "ada@devconnect.io", "Wr0ng!Pass")

    @pytest.mark.asyncio
    async def test_unknown_email(self, db_session, user_service):
        with pytest.raises(NotFoundError):
            await user_service.login(db_session, "nobody@devconnect.io", "Str0ng!Pass")


class TestProfile:

    @pytest.mark.asyncio
    async def test_update_allowed_fields(self, db_session, user_service, make_user):
        ada = await make_user("Ada")

        updated = await user_service.update_profile(
            db_session, ada, {"about": "Compilers", "skills": ["C", "c", "Haskell"], "gender": "f"}
        )

        assert updated.about == "Compilers"
        assert updated.skills == ["C", "Haskell"]
        assert updated.gender == "F"

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self, db_session, user_service, make_user):
        ada = await make_user("Ada")

        with pytest.raises(BadRequestError):
            await user_service.update_profile(db_session, ada, {})

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, db_session, user_service, make_user):
        ada = await make_user("Ada")

        with pytest.raises(ValidationError):
            await user_service.update_profile(db_session, ada, {"email_id": "x@devconnect.io"})

    @pytest.mark.asyncio
    async def test_reset_password(self, db_session, user_service, make_user):
        ada = await make_user("Ada")

        await user_service.reset_password(db_session, ada, "N3w!Password")

        user, _ = await user_service.login(db_session, "ada@devconnect.io", "N3w!Password")
        assert user.id == ada.id
        with pytest.raises(NotFoundError):
            await user_service.login(db_session, "ada@devconnect.io", "Str0ng!Pass")


class TestLookups:

    @pytest.mark.asyncio
    async def test_get_by_id(self, db_session, user_service, make_user):
        ada = await make_user("Ada")
        assert (await user_service.get_by_id(db_session, str(ada.id))).id == ada.id

    @pytest.mark.asyncio
    async def test_get_by_id_malformed(self, db_session, user_service):
        with pytest.raises(BadRequestError):
            await user_service.get_by_id(db_session, "nope")

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, db_session, user_service):
        with pytest.raises(NotFoundError):
            await user_service.get_by_id(db_session, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_get_by_email(self, db_session, user_service, make_user):
        ada = await make_user("Ada")
        assert (await user_service.get_by_email(db_session, " ADA@devconnect.io")).id == ada.id

    @pytest.mark.asyncio
    async def test_get_by_email_required(self, db_session, user_service):
        with pytest.raises(BadRequestError):
            await user_service.get_by_email(db_session, None)


class TestFeed:

    @pytest.mark.asyncio
    async def test_pagination_block(self, db_session, user_service, make_user):
        names = ["Ada", "Bob", "Cyd", "Dee", "Eve"]
        for name in names:
            await make_user(name)

        first, meta = await user_service.feed(db_session, page=1, limit=2)
        assert len(first) == 2
        assert meta.model_dump(by_alias=True) == {
            "currentPage": 1,
            "totalPages": 3,
            "totalUsers": 5,
            "hasNext": True,
            "hasPrev": False,
        }

        last, meta = await user_service.feed(db_session, page=3, limit=2)
        assert len(last) == 1
        assert meta.has_next is False
        assert meta.has_prev is True

    @pytest.mark.asyncio
    async def test_pages_cover_every_user_once(self, db_session, user_service, make_user):
        for name in ["Ada", "Bob", "Cyd", "Dee", "Eve", "Fay", "Gus"]:
            await make_user(name)

        seen = []
        page = 1
        while True:
            users, meta = await user_service.feed(db_session, page=page, limit=3)
            seen.extend(u.id for u in users)
            assert meta.has_next == (meta.current_page < meta.total_pages)
            assert meta.has_prev == (meta.current_page > 1)
            if not meta.has_next:
                break
            page += 1

        assert len(seen) == len(set(seen)) == 7
        assert meta.total_pages == math.ceil(7 / 3)

    @pytest.mark.asyncio
    async def test_newest_first(self, db_session, user_service, make_user):
        await make_user("Ada")
        await make_user("Bob")
        newest = await make_user("Cyd")

        users, _ = await user_service.feed(db_session)
        assert users[0].id == newest.id

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self, db_session, user_service, make_user):
        await make_user("Ada")

        users, meta = await user_service.feed(db_session, page=5, limit=10)
        assert users == []
        assert meta.has_next is False
        assert meta.has_prev is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 101), (10**18, 100)])
    async def test_invalid_bounds(self, db_session, user_service, page, limit):
        with pytest.raises(BadRequestError):
            await user_service.feed(db_session, page=page, limit=limit)

    @pytest.mark.asyncio
    async def test_empty_feed(self, db_session, user_service):
        users, meta = await user_service.feed(db_session)
        assert users == []
        assert meta.total_pages == 0
        assert meta.has_next is False


class TestSignupSchema:

    def test_email_must_be_valid(self):
        with pytest.raises(ValueError):
            SignupRequest(first_name="Ada", email_id="not-an-email", password="Str0ng!Pass")

    def test_accepts_camel_case_keys(self):
        payload = SignupRequest.model_validate(
            {"firstName": "Ada", "emailId": "ada@devconnect.io", "password": "Str0ng!Pass"}
        )
        assert payload.first_name == "Ada"
        assert payload.last_name == ""
