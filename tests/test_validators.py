"""
DevConnect Backend - Validator Unit Tests
============================================

Pure-function tests for devconnect.validators (no database).

What we test:
    ✅ Skill normalization: trim, case-insensitive de-dup, limits
    ✅ Password strength, names, age, gender, photo URL, about
    ✅ Partial profile cleaning rejects unknown fields
    ✅ Identifier and pagination parsing map to BadRequestError
"""

import uuid

import pytest

from devconnect.exceptions import BadRequestError, ValidationError
from devconnect.validators import (
    MAX_OFFSET,
    clean_profile_fields,
    is_strong_password,
    normalize_email,
    normalize_skills,
    parse_user_id,
    validate_about,
    validate_age,
    validate_gender,
    validate_name,
    validate_pagination,
    validate_password,
    validate_photo_url,
)


class TestNormalizeSkills:

    def test_case_insensitive_duplicates_collapse(self):
        assert normalize_skills(["Go", "go ", "RUST"]) == ["Go", "RUST"]

    def test_first_spelling_wins(self):
        assert normalize_skills(["python", "Python", "PYTHON"]) == ["python"]

    def test_idempotent(self):
        once = normalize_skills([" Rust", "Elixir ", "rust"])
        assert normalize_skills(once) == once

    def test_empty_list_allowed(self):
        assert normalize_skills([]) == []

    def test_blank_skill_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_skills(["Go", "   "])
        assert exc_info.value.field == "skills"

    def test_overlong_skill_rejected(self):
        with pytest.raises(ValidationError):
            normalize_skills(["x" * 51])

    def test_limit_applies_after_dedup(self):
        skills = [f"skill{i}" for i in range(10)] + ["SKILL0", "Skill1"]
        assert len(normalize_skills(skills)) == 10

    def test_more_than_ten_distinct_rejected(self):
        with pytest.raises(ValidationError, match="more than 10"):
            normalize_skills([f"skill{i}" for i in range(11)])


class TestPassword:

    @pytest.mark.parametrize("password", ["Str0ng!Pass", "Aa1!aaaa", "P@ssw0rd-2024"])
    def test_strong_passwords(self, password):
        assert is_strong_password(password)
        assert validate_password(password) == password

    @pytest.mark.parametrize(
        "password",
        [
            "Sh0rt!",
            "alllowercase1!",
            "ALLUPPERCASE1!",
            "NoDigits!!",
            "NoSymbols123",
        ],
    )
    def test_weak_passwords(self, password):
        with pytest.raises(ValidationError):
            validate_password(password)

    def test_missing_password(self):
        with pytest.raises(ValidationError, match="required"):
            validate_password("")


class TestProfileFields:

    def test_name_trimmed(self):
        assert validate_name("  Ada ") == "Ada"

    @pytest.mark.parametrize("name", ["Mary-Jane", "O'Brien", "Ada Lovelace"])
    def test_name_allows_space_hyphen_apostrophe(self, name):
        assert validate_name(name) == name

    @pytest.mark.parametrize("name", ["R2D2", "<b>Ada</b>", "-Ada"])
    def test_name_rejects_other_characters(self, name):
        with pytest.raises(ValidationError):
            validate_name(name)

    @pytest.mark.parametrize("name", ["A", " A ", "  B"])
    def test_first_name_length_checked_after_trim(self, name):
        with pytest.raises(ValidationError, match="at least 2"):
            validate_name(name)

    def test_single_letter_last_name_allowed(self):
        assert validate_name(" B ", field="last_name", required=False) == "B"

    def test_last_name_may_be_empty(self):
        assert validate_name("", field="last_name", required=False) == ""

    @pytest.mark.parametrize("age", [16, 30, 50])
    def test_age_in_range(self, age):
        assert validate_age(age) == age

    @pytest.mark.parametrize("age", [15, 51, True])
    def test_age_out_of_range(self, age):
        with pytest.raises(ValidationError):
            validate_age(age)

    def test_gender_upper_cased(self):
        assert validate_gender("f") == "F"

    def test_gender_rejects_unknown(self):
        with pytest.raises(ValidationError):
            validate_gender("X")

    def test_photo_url_keeps_original_string(self):
        url = "https://cdn.devconnect.io/avatars/ada.png"
        assert validate_photo_url(url) == url

    @pytest.mark.parametrize("url", ["not a url", "ftp://devconnect.io/a.png", ""])
    def test_photo_url_rejects_non_http(self, url):
        with pytest.raises(ValidationError):
            validate_photo_url(url)

    def test_about_limit(self):
        assert validate_about("a" * 500) == "a" * 500
        with pytest.raises(ValidationError):
            validate_about("a" * 501)

    @pytest.mark.parametrize(
        "about",
        ["<script>alert(1)</script>", "see javascript:void(0)", '<img onerror="x">'],
    )
    def test_about_rejects_script_content(self, about):
        with pytest.raises(ValidationError, match="invalid content"):
            validate_about(about)

    def test_clean_profile_fields_normalizes(self):
        cleaned = clean_profile_fields(
            {"gender": "o", "skills": ["Go", "GO"], "about": "  hi  ", "age": None}
        )
        assert cleaned == {"gender": "O", "skills": ["Go"], "about": "hi"}

    def test_clean_profile_fields_rejects_unknown_keys(self):
        with pytest.raises(ValidationError) as exc_info:
            clean_profile_fields({"email_id": "x@devconnect.io", "age": 20})
        assert exc_info.value.context["invalid_fields"] == ["email_id"]


class TestIdentifiersAndPagination:

    def test_parse_user_id(self):
        uid = uuid.uuid4()
        assert parse_user_id(str(uid)) == uid

    @pytest.mark.parametrize("raw", [None, "", "   ", "not-a-uuid", "12345"])
    def test_parse_user_id_rejects(self, raw):
        with pytest.raises(BadRequestError):
            parse_user_id(raw)

    def test_normalize_email(self):
        assert normalize_email("  Ada@DevConnect.IO ") == "ada@devconnect.io"

    @pytest.mark.parametrize("page,limit", [(1, 1), (1, 100), (7, 10)])
    def test_pagination_valid(self, page, limit):
        validate_pagination(page, limit)

    @pytest.mark.parametrize("page,limit", [(0, 10), (-1, 10), (1, 0), (1, 101)])
    def test_pagination_invalid(self, page, limit):
        with pytest.raises(BadRequestError, match="Invalid pagination parameters"):
            validate_pagination(page, limit)

    def test_pagination_offset_must_fit_bigint(self):
        last_page = MAX_OFFSET // 100 + 1
        validate_pagination(last_page, 100)

        with pytest.raises(BadRequestError, match="Invalid pagination parameters"):
            validate_pagination(last_page + 1, 100)
