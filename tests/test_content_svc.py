from cardreco.domain.services.content_svc import get_content_recommendations
from tests.fakes import card


async def test_never_returns_reference_or_out_of_stock(make_ctx):
    ctx = make_ctx(cards=[
        card(1, type="Fire", rarity="Rare", price=20),
        card(2, type="Fire", rarity="Rare", price=21),
        card(3, type="Fire", rarity="Rare", price=20, stock=0),
        card(4, type="Water", rarity="Common", price=5),
    ])
    items = await get_content_recommendations(ctx, 1, limit=10)
    ids = [i.card_id for i in items]
    assert 1 not in ids
    assert 3 not in ids
    assert ids[0] == 2


async def test_reasons_for_matching_card(make_ctx):
    ctx = make_ctx(cards=[
        card(1, type="Fire", rarity="Rare", price=100),
        card(2, type="Fire", rarity="Rare", price=110),
        card(3, type="Fire", rarity="Common", price=500),
    ])
    items = {i.card_id: i for i in await get_content_recommendations(ctx, 1, limit=10)}
    assert items[2].reasons == ["same type", "same rarity", "similar price"]
    assert items[3].reasons == ["same type"]


async def test_unknown_reference_is_empty(make_ctx):
    ctx = make_ctx(cards=[card(1)])
    assert await get_content_recommendations(ctx, 42, limit=5) == []


async def test_ties_break_by_card_id_and_limit(make_ctx):
    ctx = make_ctx(cards=[card(i, type="Fire", rarity="Rare", price=10) for i in (9, 1, 5, 7)])
    items = await get_content_recommendations(ctx, 1, limit=2)
    assert [i.card_id for i in items] == [5, 7]
    assert all(i.score >= 0 for i in items)
