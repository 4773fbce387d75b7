"""
LabelMapping Value Object - Immutable chat-label to enum lookup.

The chat shows Hebrew button labels (some decorated with emoji); profiles
store normalized enum values. Resolution order:
1. exact label match
2. a canonical enum value passed through as-is
3. label match after stripping everything but Hebrew letters and spaces
4. numeric interpretation (hours table only)
5. fallback value
"""

import re
from types import MappingProxyType
from typing import Callable, Mapping, Optional


_NON_HEBREW = re.compile(r"[^\u0590-\u05FF\s]")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def strip_symbols(label: str) -> str:
    """Keep Hebrew letters and whitespace only."""
    return " ".join(_NON_HEBREW.sub("", label).split())


class LabelMapping:
    """
    Read-only label -> enum table.

    Attributes:
        default: Value returned for empty or unrecognized input.
    """

    def __init__(
        self,
        labels: Mapping[str, str],
        default: str,
        numeric: Optional[Callable[[int], Optional[str]]] = None,
    ) -> None:
        self._labels = MappingProxyType(dict(labels))
        self._stripped = MappingProxyType(
            {strip_symbols(label): value for label, value in labels.items() if strip_symbols(label)}
        )
        self._values = frozenset(labels.values())
        self._numeric = numeric
        self.default = default

    @property
    def labels(self) -> Mapping[str, str]:
        return self._labels

    @property
    def values(self) -> frozenset[str]:
        return self._values

    def resolve(self, label: object) -> str:
        """Map a chat label (or raw value) to its enum value."""
        if label is None or label == "":
            return self.default

        text = str(label).strip()
        if text in self._labels:
            return self._labels[text]
        if text in self._values:
            return text

        stripped = strip_symbols(text)
        if stripped and stripped in self._stripped:
            return self._stripped[stripped]

        if self._numeric:
            match = _LEADING_INT.match(text)
            if match:
                mapped = self._numeric(int(match.group(1)))
                if mapped:
                    return mapped

        return self.default


def _hours_from_number(hours: int) -> Optional[str]:
    if hours >= 35:
        return "full_time"
    if hours > 0:
        return "part_time"
    return None


DEGREE_LABELS = LabelMapping(
    {
        "🎓 תואר ראשון": "bachelor",
        "🎓 תואר שני": "master",
        "📜 תעודת מקצוע": "certificate",
        "🏛️ קורס מקצועי": "professional_course",
        "🤔 אחר": "other",
    },
    default="other",
)

HOURS_LABELS = LabelMapping(
    {
        "משרה מלאה": "full_time",
        "משרה חלקית": "part_time",
        "גמיש": "flexible",
        "אחר": "other",
    },
    default="flexible",
    numeric=_hours_from_number,
)
