from cardreco.domain.services.id_parsers import (
    extract_card_ids,
    parse_bare_numbers,
    parse_comma_run,
    parse_labeled_loose,
    parse_name_mentions,
    validate_ids,
)
from tests.fakes import card

CANDIDATES = [
    card(3, name="Aqua Serpent", rarity="Common"),
    card(7, name="Blaze Fox", rarity="Legendary"),
    card(12, name="Volt Hare", rarity="Rare"),
    card(99, name="Stone Golem", rarity="Mythic"),
]


def test_labeled_line_keeps_model_order():
    assert extract_card_ids("IDs: 3,7,12", CANDIDATES, limit=10) == [3, 7, 12]


def test_labeled_with_spaces():
    assert parse_labeled_loose("Sure!\nIDs: 12, 3 , 99", CANDIDATES) == [12, 3, 99]


def test_comma_run_needs_three_numbers():
    assert parse_comma_run("try 99, 12, 7 today", CANDIDATES) == [99, 12, 7]
    assert parse_comma_run("try 99, 12 today", CANDIDATES) == []


def test_bare_numbers_only_keep_candidates():
    assert parse_bare_numbers("card 7 or maybe 1234 or 12", CANDIDATES) == [7, 12]


def test_invented_ids_fall_through_to_next_parser():
    # labeled line only holds unknown ids; bare numbers still finds 12
    assert extract_card_ids("IDs: 500,600\nalso 12", CANDIDATES, limit=5) == [12]


def test_validate_dedupes_and_caps():
    assert validate_ids([7, 7, 3, 404, 12], CANDIDATES, limit=2) == [7, 3]


def test_name_mentions_when_no_numbers():
    text = "I would go with the blaze fox and the STONE GOLEM."
    assert parse_name_mentions(text, CANDIDATES) == [7, 99]
    assert extract_card_ids(text, CANDIDATES, limit=2) == [7, 99]


def test_no_numbers_no_names_uses_rarity_and_fills_limit():
    ids = extract_card_ids("Honestly, anything shiny would be great!", CANDIDATES, limit=3)
    assert ids == [99, 7, 12]
    assert len(ids) == 3
