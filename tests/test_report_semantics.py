"""
Unit tests for text normalization and the status / risk synonym tables.

Tests cover:
- Case, diacritic and dotless-i folding
- Canonical status and risk level resolution in English and Turkish
- Table order precedence
- Vocabulary words used by the name heuristic
"""
import pytest
from auditbot.core.text_normalizer import normalize
from auditbot.core.report_semantics import (
    ActionStatus,
    RiskLevel,
    extract_status,
    extract_risk_level,
    is_status_value,
    is_risk_level_value,
    vocabulary_words,
)


class TestNormalize:
    """Tests for normalize()."""

    def test_lowercases_and_trims(self):
        assert normalize("  Open Actions  ") == "open actions"

    def test_strips_diacritics(self):
        assert normalize("gecikmiş") == "gecikmis"
        assert normalize("Düşük") == "dusuk"
        assert normalize("tamamlanmış") == "tamamlanmis"

    def test_dotless_i_folds_to_i(self):
        """"AÇIK", "açık" and "acik" must compare equal."""
        assert normalize("AÇIK") == normalize("açık") == normalize("acik") == "acik"

    def test_dotted_capital_i(self):
        assert normalize("İşlem") == "islem"
        assert normalize("KRİTİK") == "kritik"

    @pytest.mark.parametrize("value", ["", None])
    def test_empty_input(self, value):
        assert normalize(value) == ""


class TestExtractStatus:
    """Tests for extract_status()."""

    @pytest.mark.parametrize("text,expected", [
        ("show open actions", "Open"),
        ("AÇIK aksiyonlar", "Open"),
        ("acik aksiyonlar", "Open"),
        ("Overdue items", "Overdue"),
        ("gecikmiş aksiyonlar", "Overdue"),
        ("completed actions", "Completed"),
        ("tamamlandı olanlar", "Completed"),
        ("tamamlanmış aksiyonlar", "Completed"),
        ("risk accepted actions", "Risk Accepted"),
        ("risk kabul edildi", "Risk Accepted"),
    ])
    def test_synonyms_resolve_to_canonical_label(self, text, expected):
        assert extract_status(text) == expected

    def test_no_status(self):
        assert extract_status("critical risk actions") is None
        assert extract_status("") is None

    def test_table_order_wins(self):
        """The first table entry found in the text wins, not the first in the text."""
        assert extract_status("overdue or open") == "Open"


class TestExtractRiskLevel:
    """Tests for extract_risk_level()."""

    @pytest.mark.parametrize("text,expected", [
        ("Critical risk", "Critical"),
        ("kritik riskli", "Critical"),
        ("KRİTİK", "Critical"),
        ("yüksek risk", "High"),
        ("high risk", "High"),
        ("orta seviye", "Medium"),
        ("medium risk", "Medium"),
        ("düşük risk", "Low"),
        ("low risk", "Low"),
        ("atanmamış", "Unassigned"),
        ("unassigned risk", "Unassigned"),
    ])
    def test_synonyms_resolve_to_canonical_label(self, text, expected):
        assert extract_risk_level(text) == expected

    def test_no_risk_level(self):
        assert extract_risk_level("open actions") is None


class TestCanonicalValues:
    """Tests for the canonical value helpers."""

    def test_status_values(self):
        assert is_status_value("Risk Accepted")
        assert not is_status_value("risk accepted")
        assert {s.value for s in ActionStatus} == {"Open", "Overdue", "Completed", "Risk Accepted"}

    def test_risk_level_values(self):
        assert is_risk_level_value("Unassigned")
        assert not is_risk_level_value("Severe")
        assert len(RiskLevel) == 5

    def test_vocabulary_words_are_normalized(self):
        words = vocabulary_words()
        assert "acik" in words
        assert "critical" in words
        assert "accepted" in words
        assert "açık" not in words
