"""Client-side guards run before any request reaches the directory backend."""

import re
from typing import NamedTuple

from mosque_dashboard.core.config import get_settings
from mosque_dashboard.exceptions import ValidationError
from mosque_dashboard.models.admin import AdminAssignment
from mosque_dashboard.models.mosque import PrayerTimes

ALLOWED_EMAIL_DOMAINS = (
    "gmail.com",
    "outlook.com",
    "yahoo.com",
    "hotmail.com",
    "icloud.com",
    "protonmail.com",
)

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@("
    + "|".join(re.escape(d) for d in ALLOWED_EMAIL_DOMAINS)
    + r")$",
    re.IGNORECASE,
)
PHONE_PATTERN = re.compile(r"^\+923[0-9]{9}$")
PRAYER_TIME_PATTERN = re.compile(r"^(0?[1-9]|1[0-2]):[0-5][0-9]\s*(AM|PM)$", re.IGNORECASE)
SPECIAL_CHARACTERS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

STRENGTH_LABELS = ("Very Weak", "Weak", "Fair", "Good", "Strong")


class PasswordStrength(NamedTuple):
    score: int
    label: str


def mask_email(email: str) -> str:
    """
    Mask an email address for safe logging.
    Example: 'user@example.com' -> 'u***r@example.com'
    """
    try:
        user_part, domain = email.split("@")
        if len(user_part) <= 2:
            return f"{user_part[0]}***@{domain}"
        return f"{user_part[0]}***{user_part[-1]}@{domain}"
    except (ValueError, IndexError):
        return "***@***.***"


def validate_deletion_reason(reason: str | None, min_length: int | None = None) -> str:
    """
    Check a user-supplied deletion reason and return it trimmed.

    This is a UX guard only; the backend re-validates.

    Parameters:
        reason (str | None): Free text entered by the super admin.
        min_length (int | None): Minimum trimmed length; defaults to MIN_DELETION_REASON_LENGTH.

    Returns:
        str: The trimmed reason.

    Raises:
        ValidationError: If the reason is blank or shorter than the minimum.
    """
    if min_length is None:
        min_length = get_settings().MIN_DELETION_REASON_LENGTH
    cleaned = (reason or "").strip()
    if not cleaned:
        raise ValidationError("Please provide a reason for deletion", field="reason")
    if len(cleaned) < min_length:
        raise ValidationError(
            f"Deletion reason must be at least {min_length} characters long",
            field="reason",
        )
    return cleaned


def validate_email(email: str | None) -> str:
    cleaned = (email or "").strip()
    if not cleaned:
        raise ValidationError("Email is required", field="email")
    if not EMAIL_PATTERN.match(cleaned):
        raise ValidationError(
            f"Email must be from one of these providers: {', '.join(ALLOWED_EMAIL_DOMAINS)}",
            field="email",
        )
    return cleaned.lower()


def validate_phone(phone: str | None, required: bool = True) -> str | None:
    cleaned = (phone or "").strip()
    if not cleaned:
        if required:
            raise ValidationError("Phone number is required", field="phone")
        return None
    if not PHONE_PATTERN.match(cleaned):
        raise ValidationError(
            "Phone number must be in format +923xxxxxxxxx (e.g., +923001234567)",
            field="phone",
        )
    return cleaned


def validate_assignment(assignment: AdminAssignment) -> AdminAssignment:
    """Reject an admin assignment without a usable email before it is sent."""
    if not assignment.admin_email.strip():
        raise ValidationError("Please enter admin email", field="admin_email")
    email = validate_email(assignment.admin_email)
    phone = validate_phone(assignment.admin_phone, required=False)
    return assignment.model_copy(update={"admin_email": email, "admin_phone": phone})


def validate_prayer_times(prayer_times: PrayerTimes) -> PrayerTimes:
    """
    Ensure every prayer time is given as `HH:MM AM|PM`.

    Raises:
        ValidationError: On the first missing or malformed time, with `field` set to the prayer name.
    """
    for name, value in prayer_times.model_dump().items():
        if not value or not PRAYER_TIME_PATTERN.match(value.strip()):
            raise ValidationError("Please use format: HH:MM AM/PM", field=name)
    return PrayerTimes(
        **{name: value.strip().upper() for name, value in prayer_times.model_dump().items()}
    )


def password_strength(password: str | None) -> PasswordStrength:
    """
    Score a password from 0 to 5 for the strength meter.

    One point each for: at least 8 characters, a lowercase letter, an uppercase
    letter, a digit, and a special character.
    """
    if not password:
        return PasswordStrength(0, "")

    score = 0
    if len(password) >= 8:
        score += 1
    if re.search(r"[a-z]", password):
        score += 1
    if re.search(r"[A-Z]", password):
        score += 1
    if re.search(r"\d", password):
        score += 1
    if SPECIAL_CHARACTERS.search(password):
        score += 1

    label = STRENGTH_LABELS[score - 1] if score > 0 else STRENGTH_LABELS[0]
    return PasswordStrength(score, label)
