"""
Contact Validation - Input checks and normalization for chat answers.

Phone rules follow the Israeli numbering plan:
- mobile: 05XXXXXXXX
- landline: 0[2-4,8-9] followed by 7-8 digits
- international without '+': 972 followed by 8-9 digits
"""

import re
from pathlib import Path
from typing import Iterable, Optional

from src.domain.errors import ValidationError


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PHONE_PATTERNS = (
    re.compile(r"^05\d{8}$"),
    re.compile(r"^0[2-489]\d{7,8}$"),
    re.compile(r"^972[2-9]\d{7,8}$"),
)

_DISALLOWED_TEXT = re.compile(r"[^\u0590-\u05FFa-zA-Z0-9\s\-.,!?()]")

CV_EXTENSIONS = ("pdf", "doc", "docx")
TRANSCRIPT_EXTENSIONS = ("pdf", "jpg", "jpeg", "png")
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value)


def is_valid_email(email: Optional[str]) -> bool:
    """Loose shape check: something@something.tld."""
    return bool(email) and EMAIL_RE.match(email.strip()) is not None


def is_valid_israeli_phone(phone: Optional[str]) -> bool:
    """Check a phone number against the mobile/landline/international patterns."""
    if not phone:
        return False
    digits = _digits(phone)
    return any(pattern.match(digits) for pattern in PHONE_PATTERNS)


def format_israeli_phone(phone: Optional[str]) -> str:
    """
    Format a phone number for display and matching.

    "0501234567" -> "050-123-4567", "021234567" -> "02-123-4567".
    Numbers matching neither shape are returned unchanged.
    """
    if not phone:
        return ""
    digits = _digits(phone)

    if len(digits) == 10 and digits.startswith("05"):
        return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    if len(digits) >= 9 and digits.startswith("0"):
        return f"{digits[:2]}-{digits[2:5]}-{digits[5:]}"

    return phone


def clean_text_input(text: Optional[str], max_length: int = 1000) -> str:
    """Collapse whitespace, drop unexpected symbols, truncate."""
    if not text:
        return ""
    cleaned = " ".join(text.split())
    cleaned = _DISALLOWED_TEXT.sub("", cleaned)
    return cleaned[:max_length]


def validate_upload(
    file_path: Path,
    allowed_types: Iterable[str] = CV_EXTENSIONS,
    max_size: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> None:
    """
    Validate an uploaded file's type and size.

    Raises:
        ValidationError: If the file is missing, of the wrong type or too large.
    """
    allowed = tuple(allowed_types)
    if not file_path.exists():
        raise ValidationError(f"File not found: {file_path.name}", field="file")

    extension = file_path.suffix.lower().lstrip(".")
    if extension not in allowed:
        raise ValidationError(
            f"Invalid file type. Allowed types: {', '.join(allowed)}",
            field="file",
        )

    if file_path.stat().st_size > max_size:
        raise ValidationError(
            f"File size too large. Maximum size is {max_size // (1024 * 1024)}MB",
            field="file",
        )
