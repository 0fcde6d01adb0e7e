import pytest

from cardreco.domain.services.chat_filters import detect_constraints, detect_price_range
from tests.fakes import card


@pytest.mark.parametrize("message,expected", [
    ("cartas de fogo até 50 reais", (None, 50.0)),
    ("cards between 10 and 20", (10.0, 20.0)),
    ("entre R$ 30 e 15", (15.0, 30.0)),
    ("algo de 20 a 40 reais", (20.0, 40.0)),
    ("anything above 100?", (100.0, None)),
    ("acima de 99,90", (99.9, None)),
    ("under $25 please", (None, 25.0)),
    ("menos de 5", (None, 5.0)),
    ("show me dragons", (None, None)),
    ("cartas até R$ 1.000,00", (None, 1000.0)),
    ("acima de 2.500", (2500.0, None)),
    ("entre 1.000 e 12.500,50", (1000.0, 12500.5)),
    ("up to 12.5", (None, 12.5)),
    ("above 20 and under 50", (20.0, 50.0)),
    ("menos de 80 e mais de 30", (30.0, 80.0)),
    ("no more than 40", (None, 40.0)),
])
def test_price_range(message, expected):
    assert detect_price_range(message) == expected


def test_type_and_rarity_keywords_pt_and_en():
    c = detect_constraints("Quero cartas lendárias de água")
    assert c.card_type == "water"
    assert c.rarity == "legendary"
    assert detect_constraints("any DRAGON cards?").card_type == "dragon"


def test_keywords_match_whole_words_only():
    # "uncommon" must not read as "common"; "marvelous" must not read as "mar"
    c = detect_constraints("uncommon and marvelous")
    assert c.rarity == "uncommon"
    assert c.card_type is None


def test_constraint_predicates():
    c = detect_constraints("fire cards up to 50")
    assert c.hard_ok(card(1, type="Fire", price=50))
    assert not c.hard_ok(card(2, type="Fire", price=51))
    assert not c.hard_ok(card(3, type="Water", price=5))
    assert c.describe(card(1, type="Fire", price=50)) == ["matches requested type fire", "price up to R$ 50.00"]


def test_thousands_budget_keeps_expensive_cards():
    c = detect_constraints("cartas lendárias até R$ 1.000,00")
    assert c.max_price == 1000.0
    assert c.price_ok(card(1, price=850))
