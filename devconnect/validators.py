"""
DevConnect Backend - Domain Validation & Normalization
========================================================

What:  Pure functions that enforce profile rules and normalize user input.
Why:   Kept apart from the ORM so services validate before constructing an
       entity, and tests exercise the rules without a database.
How:   Each `validate_*` raises ValidationError (400) on failure and returns
       the cleaned value on success. Request schemas check shape (types,
       lengths, enums); these functions check meaning.

Rules:
    - Names:     letters plus space, hyphen, apostrophe; first name at least
                 2 chars after trimming
    - Password:  >= 8 chars with upper, lower, digit and symbol
    - Age:       whole number 16-50
    - Gender:    M, F or O (case-insensitive, stored upper-case)
    - Photo URL: absolute http(s) URL
    - About:     <= 500 chars, no script tags / javascript: / on*= handlers
    - Skills:    each 1-50 chars after trimming; de-duplicated
                 case-insensitively (first spelling wins); at most 10 remain
"""

import re
import uuid
from typing import Any, Dict, Iterable, List, Optional

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from devconnect.exceptions import BadRequestError, ValidationError

MIN_AGE = 16
MAX_AGE = 50
MAX_ABOUT_LENGTH = 500
MAX_SKILLS = 10
MAX_SKILL_LENGTH = 50
MIN_PASSWORD_LENGTH = 8
MIN_FIRST_NAME_LENGTH = 2
MAX_PAGE_SIZE = 100
# Largest OFFSET a signed 64-bit integer column accepts
MAX_OFFSET = 2**63 - 1
GENDERS = ("M", "F", "O")

UPDATABLE_PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "age",
    "gender",
    "photo_url",
    "about",
    "skills",
)

_NAME_RE = re.compile(r"[A-Za-z][A-Za-z '\-]*")
_UNSAFE_ABOUT_RE = re.compile(r"<script|javascript:|on\w+=", re.IGNORECASE)
_http_url = TypeAdapter(HttpUrl)


def parse_user_id(value: Optional[str], label: str = "User ID") -> uuid.UUID:
    """Parse a path/query identifier, mapping absence or garbage to 400."""
    if value is None or not str(value).strip():
        raise BadRequestError(f"{label} is required")
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        raise BadRequestError(f"Invalid {label} format", context={"value": str(value)})


def validate_name(value: str, field: str = "first_name", required: bool = True) -> str:
    name = (value or "").strip()
    if not name:
        if required:
            raise ValidationError("First name is required", field=field)
        return ""
    if field == "first_name" and len(name) < MIN_FIRST_NAME_LENGTH:
        raise ValidationError(
            f"First name must be at least {MIN_FIRST_NAME_LENGTH} characters", field=field
        )
    if not _NAME_RE.fullmatch(name):
        label = "First name" if field == "first_name" else "Last name"
        raise ValidationError(f"{label} must contain only letters and spaces", field=field)
    return name


def is_strong_password(password: str) -> bool:
    return (
        len(password) >= MIN_PASSWORD_LENGTH
        and any(c.islower() for c in password)
        and any(c.isupper() for c in password)
        and any(c.isdigit() for c in password)
        and any(not c.isalnum() and not c.isspace() for c in password)
    )


def validate_password(password: str) -> str:
    if not password:
        raise ValidationError("Password is required", field="password")
    if not is_strong_password(password):
        raise ValidationError(
            "Password must be at least 8 characters with uppercase, lowercase, "
            "number, and special character",
            field="password",
        )
    return password


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_age(age: int) -> int:
    if isinstance(age, bool) or not isinstance(age, int) or not MIN_AGE <= age <= MAX_AGE:
        raise ValidationError(f"Age must be between {MIN_AGE} and {MAX_AGE}", field="age")
    return age


def validate_gender(gender: str) -> str:
    value = (gender or "").strip().upper()
    if value not in GENDERS:
        raise ValidationError("Gender must be M, F, or O", field="gender")
    return value


def validate_photo_url(url: str) -> str:
    value = (url or "").strip()
    try:
        _http_url.validate_python(value)
    except PydanticValidationError:
        raise ValidationError("Photo URL must be a valid URL", field="photo_url")
    return value


def validate_about(about: str) -> str:
    value = (about or "").strip()
    if len(value) > MAX_ABOUT_LENGTH:
        raise ValidationError(
            f"About section cannot exceed {MAX_ABOUT_LENGTH} characters", field="about"
        )
    if _UNSAFE_ABOUT_RE.search(value):
        raise ValidationError("About section contains invalid content", field="about")
    return value


def normalize_skills(skills: Iterable[str]) -> List[str]:
    """
    Trim, drop duplicates case-insensitively (first spelling wins), validate.

    ["Go", "go ", "RUST"] → ["Go", "RUST"]. Idempotent.
    """
    cleaned: List[str] = []
    seen = set()
    for raw in skills:
        if not isinstance(raw, str):
            raise ValidationError("Each skill must be a string", field="skills")
        skill = raw.strip()
        if not skill or len(skill) > MAX_SKILL_LENGTH:
            raise ValidationError(
                f"Each skill must be a non-empty string with maximum {MAX_SKILL_LENGTH} characters",
                field="skills",
            )
        key = skill.lower()
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(skill)

    if len(cleaned) > MAX_SKILLS:
        raise ValidationError(f"Cannot have more than {MAX_SKILLS} skills", field="skills")
    return cleaned


def clean_profile_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and normalize a partial profile (update or signup extras).

    Only keys present in `data` are checked; unknown keys are rejected.
    """
    invalid = sorted(set(data) - set(UPDATABLE_PROFILE_FIELDS))
    if invalid:
        raise ValidationError(
            "Invalid fields for update",
            context={"invalid_fields": invalid, "allowed_fields": list(UPDATABLE_PROFILE_FIELDS)},
        )

    cleaned: Dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if key == "first_name":
            cleaned[key] = validate_name(value, field="first_name")
        elif key == "last_name":
            cleaned[key] = validate_name(value, field="last_name", required=False)
        elif key == "age":
            cleaned[key] = validate_age(value)
        elif key == "gender":
            cleaned[key] = validate_gender(value)
        elif key == "photo_url":
            cleaned[key] = validate_photo_url(value)
        elif key == "about":
            cleaned[key] = validate_about(value)
        elif key == "skills":
            cleaned[key] = normalize_skills(value)
    return cleaned


def validate_pagination(page: int, limit: int) -> None:
    # (page - 1) * limit becomes OFFSET; anything past a 64-bit int is rejected
    if page < 1 or limit < 1 or limit > MAX_PAGE_SIZE or (page - 1) * limit > MAX_OFFSET:
        raise BadRequestError(
            "Invalid pagination parameters. Page must be >= 1, limit must be 1-100",
            context={"page": page, "limit": limit},
        )
