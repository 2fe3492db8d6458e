"""Tests for resolution text clean-up and query sanitising."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from helpdesk_common.text import clean_and_format, sanitize_search_query  # noqa: E402

SAMPLES = [
    "  Riavviare   il\tservizio  ",
    "Passo 1\n\n\n  Passo 2",
    "Fatto!",
    "",
    "   ",
    "<p>Riavviare</p><br/>il PC",
    "Riga uno \r\n\r\n riga due?",
    "a<b",
    "latenza < 100 ms, se > 200 ms <b>ticket</b>",
    "Testo gia pulito.",
]


def test_clean_and_format_collapses_spaces_and_adds_period() -> None:
    assert clean_and_format("  Riavviare   il\tservizio  ") == "Riavviare il servizio."


def test_clean_and_format_collapses_newline_runs() -> None:
    assert clean_and_format("Passo 1\n\n\n  Passo 2") == "Passo 1\nPasso 2."


def test_clean_and_format_keeps_existing_terminal_punctuation() -> None:
    assert clean_and_format("Fatto!") == "Fatto!"
    assert clean_and_format("Riavviato?") == "Riavviato?"


@pytest.mark.parametrize("text", ["", "   ", None])
def test_clean_and_format_leaves_blank_text_empty(text) -> None:
    assert clean_and_format(text) == ""


def test_clean_and_format_removes_markup() -> None:
    assert clean_and_format("<p>Riavviare</p><br/>il PC") == "Riavviare\nil PC."


def test_clean_and_format_keeps_text_around_comparisons() -> None:
    text = "Se la latenza < 100 ms riavviare il router, se > 200 ms aprire ticket al provider"

    assert clean_and_format(text) == (
        "Se la latenza 100 ms riavviare il router, se 200 ms aprire ticket al provider."
    )


def test_clean_and_format_removes_tags_with_attributes() -> None:
    assert clean_and_format('Vedi <a href="kb/12">guida</a> e x<3') == "Vedi guida e x3."


@pytest.mark.parametrize("text", SAMPLES)
def test_clean_and_format_is_idempotent(text: str) -> None:
    once = clean_and_format(text)

    assert clean_and_format(once) == once


def test_sanitize_search_query_removes_quotes_and_brackets() -> None:
    assert sanitize_search_query('Errore "IPOS" <cassa> \\ ok') == "Errore IPOS cassa  ok"


def test_sanitize_search_query_caps_length() -> None:
    assert len(sanitize_search_query("a" * 150)) == 100


def test_sanitize_search_query_handles_missing_text() -> None:
    assert sanitize_search_query(None) == ""
    assert sanitize_search_query("   ") == ""
