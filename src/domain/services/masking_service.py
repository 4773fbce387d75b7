"""
Masking Service - Obscure PII in free text shown to unverified viewers.

Applied in order:
1. email addresses -> masked local part @ masked domain
2. digit runs -> first and last digit kept, interior digits starred
3. runs of 4+ Latin/Hebrew letters -> first and last letter kept
   (handles and user@host strings without a TLD included)
"""

import re
from typing import Optional


EMAIL_PATTERN = re.compile(r"[\w.-]+@[\w.-]+\.\w+", re.ASCII)

# Hyphen-joined digit groups (054-123-4567) are one run
DIGIT_RUN_PATTERN = re.compile(r"\d+(?:-\d+)*", re.ASCII)

# Letter runs bounded by non-word characters; runs touching * are already masked
WORD_PATTERN = re.compile(r"(?<![\w*])[A-Za-z\u0590-\u05FF]{4,}(?![\w*])")


def mask_word(word: str) -> str:
    """
    Keep the first and last character, star the rest.

    "important" -> "i*******t"; words of up to 2 characters become "**".
    """
    if len(word) <= 2:
        return "**"
    return word[0] + "*" * (len(word) - 2) + word[-1]


def mask_email(email: str) -> str:
    """Mask local part and domain independently."""
    local_part, _, domain = email.partition("@")
    if not domain:
        return mask_word(local_part)
    return f"{mask_word(local_part)}@{mask_word(domain)}"


def _mask_digit_run(match: re.Match) -> str:
    run = match.group()
    digits = [i for i, char in enumerate(run) if char != "-"]
    first, last = digits[0], digits[-1]
    return "".join(
        char if char == "-" or i in (first, last) else "*"
        for i, char in enumerate(run)
    )


def mask_numbers(text: str) -> str:
    """Star interior digits of each digit run."""
    return DIGIT_RUN_PATTERN.sub(_mask_digit_run, text)


def mask_sensitive_data(text: Optional[str]) -> Optional[str]:
    """
    Mask emails, numbers and probable names in a text.

    Args:
        text: Free text (non-string and empty input is returned unchanged).

    Returns:
        The masked text.
    """
    if not text or not isinstance(text, str):
        return text

    masked = EMAIL_PATTERN.sub(lambda m: mask_email(m.group()), text)
    masked = mask_numbers(masked)
    return WORD_PATTERN.sub(lambda m: mask_word(m.group()), masked)
