import pytest

from cardreco.domain.services.popular_svc import get_popular_recommendations
from cardreco.domain.services.recommendation_svc import get_recommendations
from tests.fakes import ScriptedCompleter, card

CARDS = [card(1, type="Fire"), card(2, type="Fire", rarity="Rare"), card(3, type="Water")]
ORDERS = [("me", [(1, 1)]), ("you", [(1, 1), (2, 1)])]


@pytest.mark.parametrize("strategy", ["collaborative", "history"])
async def test_customer_strategies_without_customer_use_popular(make_ctx, strategy):
    ctx = make_ctx(cards=CARDS, orders=ORDERS)
    res = await get_recommendations(ctx, strategy, limit=2)
    assert res.strategy == strategy
    assert res.items == await get_popular_recommendations(ctx, 2)
    assert res.count == len(res.items)


async def test_content_without_reference_is_empty(make_ctx):
    res = await get_recommendations(make_ctx(cards=CARDS), "content")
    assert res.items == []
    assert res.count == 0


async def test_content_with_reference(make_ctx):
    res = await get_recommendations(make_ctx(cards=CARDS), "content", reference_item_id=1, limit=5)
    assert res.reference_item_id == 1
    assert 1 not in [i.card_id for i in res.items]


async def test_generative_dispatch(make_ctx):
    ctx = make_ctx(cards=CARDS, orders=ORDERS, completer=ScriptedCompleter("IDs: 3"))
    res = await get_recommendations(ctx, "generative", customer_id="me", limit=1)
    assert [i.card_id for i in res.items] == [3]


async def test_unknown_strategy_raises(make_ctx):
    with pytest.raises(ValueError):
        await get_recommendations(make_ctx(), "astrology")
