"""Tests for description normalization and tokenization."""

import pytest

from ledger_ml.inference.classification.preprocessing import (
    extract_significant_tokens,
    normalize_description,
    suggestion_pattern,
)


class TestNormalizeDescription:
    """Tests for boilerplate stripping."""

    def test_disposition_with_reference(self) -> None:
        assert (
            normalize_description("Disposizione - RIF:149304229BEN. ORLANDO ANNAMARIA")
            == "orlando annamaria"
        )

    def test_reference_numbers_removed(self) -> None:
        assert normalize_description("EDISON BOLLETTA LUCE RIF:98765") == "edison bolletta luce"
        assert normalize_description("EDISON BOLLETTA LUCE RIF:12345") == "edison bolletta luce"

    def test_card_operation_and_date_removed(self) -> None:
        text = "Operazione carta 04035323 del 15/01/2025 ESSELUNGA MILANO"
        assert normalize_description(text) == "esselunga milano"

    def test_times_removed_card_numbers_kept(self) -> None:
        assert (
            normalize_description("PAGAMENTO POS CARTA 1234 ESSELUNGA 08:14")
            == "pagamento pos carta 1234 esselunga"
        )

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value: str | None) -> None:
        assert normalize_description(value) == ""

    @pytest.mark.parametrize(
        "text",
        [
            "Disposizione - RIF:149304229BEN. ORLANDO ANNAMARIA",
            "rif:.123 canone del 01/02/2024 ore 10:30",
            "VS FATTURA NR. 12 DEL 03/04/2024 TIM SPA",
        ],
    )
    def test_idempotent(self, text: str) -> None:
        once = normalize_description(text)
        assert normalize_description(once) == once


class TestSignificantTokens:
    def test_stopwords_numbers_and_duplicates_dropped(self) -> None:
        tokens = extract_significant_tokens(
            "BONIFICO A FAVORE DI ROSSI MARIO RIF:123 ROSSI 2024"
        )
        assert tokens == ["favore", "rossi", "mario"]

    def test_short_words_dropped(self) -> None:
        assert extract_significant_tokens("ab cd enel") == ["enel"]

    def test_empty(self) -> None:
        assert extract_significant_tokens(None) == []


class TestSuggestionPattern:
    def test_digits_and_separators_removed(self) -> None:
        assert suggestion_pattern("Canone locazione 01/2024") == "CANONE LOCAZIONE"
        assert suggestion_pattern("CANONE LOCAZIONE 11/2024") == "CANONE LOCAZIONE"

    def test_prefix_only(self) -> None:
        long_text = "A" * 60
        assert suggestion_pattern(long_text) == "A" * 40

    def test_prefix_taken_before_trimming(self) -> None:
        """Leading blanks count toward the prefix; the cut is then trimmed."""
        assert suggestion_pattern("     " + "A" * 60) == "A" * 35
        assert suggestion_pattern("CANONE LOCAZIONE" + " " * 24 + "ROSSI") == "CANONE LOCAZIONE"
