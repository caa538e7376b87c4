from __future__ import annotations

import re

from pydantic import BaseModel, field_validator

CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _sanitize_text(value: str, max_length: int) -> str:
    cleaned = CONTROL_CHARS_RE.sub("", value.strip())
    if len(cleaned) > max_length:
        raise ValueError("Value is too long")
    return cleaned


def _validate_email(value: str) -> str:
    cleaned = _sanitize_text(value, 254)
    if cleaned and not EMAIL_RE.match(cleaned):
        raise ValueError("Invalid email address")
    return cleaned


def _normalize_phone(value: str) -> str:
    cleaned = CONTROL_CHARS_RE.sub("", value.strip())
    if not cleaned:
        return ""
    cleaned = re.sub(r"[()\s\-\.]", "", cleaned)
    digits = cleaned[1:] if cleaned.startswith("+") else cleaned
    if not digits.isdigit() or not (8 <= len(digits) <= 15):
        raise ValueError("Invalid phone number")
    return f"+{digits}"


class ProfileRecord(BaseModel):
    is_onboarding_completed: bool = False
    first_name: str = ""
    last_name: str = ""
    avatar_image: str = ""
    email: str = ""
    phone_number: str = ""
    notify_order_status: bool = True
    notify_password_changes: bool = True
    notify_special_offers: bool = True
    notify_newsletter: bool = True

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _sanitize_text(value, 64)

    @field_validator("avatar_image")
    @classmethod
    def validate_avatar(cls, value: str) -> str:
        return _sanitize_text(value, 2048)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _validate_email(value)

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        return _normalize_phone(value)

    @property
    def initials(self) -> str:
        return f"{self.first_name[:1]}{self.last_name[:1]}".upper()
