"""
Resume Parser - PDF and DOCX text extraction.

Uses PyMuPDF (fitz) for PDF and python-docx for DOCX, then pulls
contact details out of the text with regular expressions.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import fitz  # PyMuPDF
from docx import Document

from src.domain.services.contact_validation import format_israeli_phone, is_valid_israeli_phone


EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

# Israeli mobile/landline, local or +972 prefixed, optional separators
PHONE_RE = re.compile(
    r"(?:\+?972[-\s]?|0)(?:5\d|[2-489])[-\s]?\d{3}[-\s]?\d{3,4}"
)

NAME_LINE_RE = re.compile(r"^[A-Za-z\u0590-\u05FF'\-]+(?:\s+[A-Za-z\u0590-\u05FF'\-]+){1,3}$")


@dataclass
class ParsedCV:
    """
    Best-effort contact details read from a CV.

    Attributes:
        name / email / phone: Extracted values (None when not found)
        confidence: Per-field confidence between 0 and 1
        text: Full extracted text
    """

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    confidence: dict[str, float] = field(default_factory=dict)
    text: str = ""

    @property
    def overall_confidence(self) -> float:
        """Mean confidence over name, email and phone (missing counts as 0)."""
        keys = ("name", "email", "phone")
        return sum(self.confidence.get(key, 0.0) for key in keys) / len(keys)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "confidence": dict(self.confidence),
        }


def _normalize_phone(raw: str) -> str:
    digits = re.sub(r"\D", "", raw)
    if digits.startswith("972"):
        digits = "0" + digits[3:]
    return format_israeli_phone(digits)


def _pdf_text(file_path: Path) -> str:
    with fitz.open(str(file_path)) as doc:
        pages = [page.get_text() for page in doc]
    return "\n\n".join(text for text in pages if text)


def _docx_text(file_path: Path) -> str:
    doc = Document(str(file_path))
    lines = [p.text for p in doc.paragraphs if p.text.strip()]

    # Contact blocks are often laid out as tables
    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(" | ".join(cells))

    return "\n".join(lines)


class ResumeParser:
    """
    Reads CV files and pulls candidate contact details from their text.

    PDF goes through PyMuPDF, Word documents through python-docx.
    """

    EXTRACTORS = {
        ".pdf": _pdf_text,
        ".docx": _docx_text,
        ".doc": _docx_text,
    }

    @classmethod
    def extract_text(cls, file_path: Path) -> str:
        """
        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the file type is not supported.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"CV file not found: {file_path}")

        extractor = cls.EXTRACTORS.get(file_path.suffix.lower())
        if extractor is None:
            raise ValueError(f"Unsupported CV file type: {file_path.suffix}")
        return extractor(file_path)

    @classmethod
    def extract_contact_info(cls, text: str) -> ParsedCV:
        """
        Extract contact information from resume text.

        Args:
            text: Resume text content.

        Returns:
            ParsedCV with email, phone, name and per-field confidence.
        """
        parsed = ParsedCV(text=text)

        email_match = EMAIL_RE.search(text)
        if email_match:
            parsed.email = email_match.group().lower()
            parsed.confidence["email"] = 0.95

        phone_match = PHONE_RE.search(text)
        if phone_match:
            parsed.phone = _normalize_phone(phone_match.group())
            parsed.confidence["phone"] = 0.9 if is_valid_israeli_phone(parsed.phone) else 0.4

        # Name: usually one of the first lines, letters only, 2-4 words
        lines = text.strip().split("\n")
        for line in lines[:5]:
            line = " ".join(line.split())
            if len(line) > 3 and NAME_LINE_RE.match(line):
                parsed.name = line
                parsed.confidence["name"] = 0.6
                break

        return parsed
