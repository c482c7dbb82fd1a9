"""Reusable validators for template authoring and answer checks.

Provides:
- Email format check (used by EMAIL fields and submitter emails)
- Field name check (answer keys must be stable identifiers)
- String sanitization for authored labels and titles
"""

import re

# Regex patterns
EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
FIELD_NAME_REGEX = re.compile(r"^[^\s]+$")

# XSS patterns
XSS_PATTERNS = [
    r"<script[^>]*>.*?</script>",
    r"javascript:",
    r"on\w+\s*=",
    r"<iframe",
]


def is_valid_email(value: str) -> bool:
    """Non-raising email check for answer validation."""
    return len(value) <= 254 and bool(EMAIL_REGEX.match(value.strip()))


def validate_email(value: str) -> str:
    """Validate email address.

    Args:
        value: Email address

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email is invalid
    """
    if not value:
        raise ValueError("Email is required")

    value = value.strip().lower()

    if len(value) > 254:  # RFC 5321
        raise ValueError("Email address too long")

    if not EMAIL_REGEX.match(value):
        raise ValueError("Invalid email address format")

    return value


def validate_field_name(value: str) -> str:
    """Field names key the answer map and condition references.

    Raises:
        ValueError: If the name is empty or contains whitespace
    """
    if not value or not FIELD_NAME_REGEX.match(value):
        raise ValueError("Field name must be a non-empty identifier without whitespace")
    if len(value) > 100:
        raise ValueError("Field name too long (max 100 characters)")
    return value


def sanitize_string(value: str, max_length: int = 200) -> str:
    """Trim, bound the length and reject script injection in authored text.

    Raises:
        ValueError: If validation fails
    """
    if not isinstance(value, str):
        raise ValueError("Must be a string")

    value = value.strip()
    if not value:
        raise ValueError("Must not be empty")

    if len(value) > max_length:
        raise ValueError(f"String too long (max {max_length} characters)")

    for pattern in XSS_PATTERNS:
        if re.search(pattern, value, re.IGNORECASE):
            raise ValueError("Invalid characters detected")

    return value
