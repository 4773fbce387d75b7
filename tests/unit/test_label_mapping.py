"""
Unit tests for chat label mapping.
"""

import pytest

from src.domain.value_objects import DEGREE_LABELS, HOURS_LABELS, LabelMapping
from src.domain.value_objects.label_mapping import strip_symbols


class TestDegreeLabels:
    """Tests for the degree table."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("🎓 תואר ראשון", "bachelor"),
            ("🎓 תואר שני", "master"),
            ("📜 תעודת מקצוע", "certificate"),
            ("🏛️ קורס מקצועי", "professional_course"),
            ("🤔 אחר", "other"),
        ],
    )
    def test_exact_labels(self, label, expected):
        """Should map every chat button."""
        assert DEGREE_LABELS.resolve(label) == expected

    def test_label_without_emoji(self):
        """Should match after stripping decorations."""
        assert DEGREE_LABELS.resolve("תואר שני") == "master"
        assert DEGREE_LABELS.resolve("  קורס מקצועי!") == "professional_course"

    def test_canonical_value_passes_through(self):
        """Should accept an already-normalized value."""
        assert DEGREE_LABELS.resolve("bachelor") == "bachelor"

    @pytest.mark.parametrize("label", [None, "", "דוקטורט", "PhD"])
    def test_unknown_falls_back(self, label):
        """Should return the default for unknown input."""
        assert DEGREE_LABELS.resolve(label) == "other"


class TestHoursLabels:
    """Tests for the hours-per-week table."""

    def test_labels(self):
        """Should map the chat buttons."""
        assert HOURS_LABELS.resolve("משרה מלאה") == "full_time"
        assert HOURS_LABELS.resolve("משרה חלקית") == "part_time"
        assert HOURS_LABELS.resolve("גמיש") == "flexible"

    @pytest.mark.parametrize(
        "label,expected",
        [("40", "full_time"), ("35", "full_time"), ("20 שעות", "part_time"), ("0", "flexible")],
    )
    def test_numeric_hours(self, label, expected):
        """Should classify a typed number of hours."""
        assert HOURS_LABELS.resolve(label) == expected

    def test_unknown_falls_back(self):
        """Should default to flexible."""
        assert HOURS_LABELS.resolve("whenever") == "flexible"
        assert HOURS_LABELS.resolve(None) == "flexible"


class TestLabelMapping:
    """Tests for LabelMapping behaviour."""

    def test_tables_are_read_only(self):
        """Should refuse modification."""
        with pytest.raises(TypeError):
            DEGREE_LABELS.labels["new"] = "value"

    def test_source_mapping_copied(self):
        """Should not follow later changes to the source dict."""
        source = {"כן": "yes"}
        mapping = LabelMapping(source, default="no")
        source["לא"] = "no"

        assert "לא" not in mapping.labels
        assert mapping.resolve("לא") == "no"

    def test_strip_symbols(self):
        """Should keep Hebrew letters and single spaces."""
        assert strip_symbols("🎓  תואר ראשון ✔") == "תואר ראשון"
        assert strip_symbols("abc 123") == ""
