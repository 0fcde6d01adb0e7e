import json

import pytest

from cardreco.domain.services.chat_svc import parse_chat_reply, resolve
from tests.fakes import FailingCompleter, ScriptedCompleter, card

FIRE_CATALOG = [
    card(1, name="Ember Pup", type="Fire", price=30),
    card(2, name="Flame Drake", type="Fire", price=45),
    card(3, name="Inferno King", type="Fire", price=60),
    card(4, name="Tide Turtle", type="Water", price=40),
]
MESSAGE = "cartas de fogo até 50 reais"


def _reply(text, ids):
    return json.dumps({"text": text, "cardIds": [str(i) for i in ids]})


@pytest.mark.parametrize("completer", [
    ScriptedCompleter(_reply("Veja estas!", [3, 4])),
    ScriptedCompleter(_reply("Só esta", [1])),
    ScriptedCompleter(_reply("Nada", [])),
    ScriptedCompleter("I have no idea what you mean"),
    FailingCompleter(),
    None,
], ids=["violating", "partial", "empty", "garbage", "failing", "absent"])
async def test_fire_under_50_whatever_the_model_says(make_ctx, completer):
    ctx = make_ctx(cards=FIRE_CATALOG, completer=completer)
    res = await resolve(ctx, MESSAGE)
    assert {i.card_id for i in res.items} == {1, 2}
    assert res.text


async def test_model_text_and_order_kept_without_constraints(make_ctx):
    completer = ScriptedCompleter("```json\n" + _reply("Try these two", [4, 2]) + "\n```")
    ctx = make_ctx(cards=FIRE_CATALOG, completer=completer)
    res = await resolve(ctx, "what should I buy next?")
    assert res.text == "Try these two"
    assert [i.card_id for i in res.items] == [4, 2]
    assert res.items[0].reasons == ["suggested by the assistant"]
    assert res.items[0].score > res.items[1].score


async def test_cap_and_history_in_prompt(make_ctx):
    cards = [card(i, type="Grass", price=5) for i in range(1, 21)]
    completer = ScriptedCompleter(_reply("lots", list(range(1, 21))))
    ctx = make_ctx(cards=cards, orders=[("me", [(1, 2)])], completer=completer)
    res = await resolve(ctx, "cheap grass cards", customer_id="me")
    assert len(res.items) == 8
    assert "CUSTOMER HISTORY" in completer.prompts[0]
    assert "2x Card 1" in completer.prompts[0]


async def test_rarity_fallback_when_model_gives_nothing(make_ctx):
    cards = [card(1, rarity="Common"), card(2, rarity="Legendary"), card(3, rarity="Legendary", price=500)]
    ctx = make_ctx(cards=cards)
    res = await resolve(ctx, "quero cartas lendárias abaixo de 100")
    assert [i.card_id for i in res.items] == [2]
    assert res.text == "Here are some legendary cards you may like."


def test_parse_reply_json_with_numeric_ids():
    reply = parse_chat_reply('{"text": "hi", "cardIds": [1, "2"]}')
    assert reply.text == "hi"
    assert reply.card_ids == ["1", "2"]


def test_parse_reply_regex_fallback():
    raw = 'Sure! {"text": "Here you go \\"friend\\"", "cardIds": ["5", "6"]} hope it helps'
    reply = parse_chat_reply(raw)
    assert reply.text == 'Here you go "friend"'
    assert reply.card_ids == ["5", "6"]


def test_parse_reply_raw_text():
    reply = parse_chat_reply("json\nJust some words")
    assert reply.text == "Just some words"
    assert reply.card_ids == []


@pytest.mark.parametrize("card_ids,expected", [
    ("17", ["17"]),
    (17, ["17"]),
    ("17, 18", ["17", "18"]),
    (["17", 18, " "], ["17", "18"]),
    (None, []),
])
def test_parse_reply_card_id_shapes(card_ids, expected):
    reply = parse_chat_reply(json.dumps({"text": "try this", "cardIds": card_ids}))
    assert reply.card_ids == expected


NAMED_CATALOG = [
    card(1, name="Pikachu", type="Electric", price=10),
    card(2, name="Bulbasaur", type="Grass", price=12),
    card(3, name="Squirtle", type="Water", price=9),
]


async def test_named_card_in_reply_without_ids(make_ctx):
    completer = ScriptedCompleter("O Pikachu custa R$ 10 e é ótimo para iniciantes.")
    ctx = make_ctx(cards=NAMED_CATALOG, completer=completer)
    res = await resolve(ctx, "me fala do Pikachu")
    assert [i.card_id for i in res.items] == [1]
    assert "mentioned by name" in res.items[0].reasons
    assert res.text.startswith("O Pikachu")


async def test_named_card_in_message_without_model(make_ctx):
    ctx = make_ctx(cards=NAMED_CATALOG)
    res = await resolve(ctx, "is squirtle still available?")
    assert [i.card_id for i in res.items] == [3]


async def test_ids_take_precedence_over_names(make_ctx):
    completer = ScriptedCompleter(_reply("Bulbasaur is nice but take Squirtle", [3]))
    ctx = make_ctx(cards=NAMED_CATALOG, completer=completer)
    res = await resolve(ctx, "me fala do Pikachu")
    assert [i.card_id for i in res.items] == [3]
    assert res.items[0].reasons == ["suggested by the assistant"]
