from cardreco.domain.services.popular_svc import get_popular_recommendations
from tests.fakes import card


async def test_no_sales_orders_by_rarity_then_price(make_ctx):
    ctx = make_ctx(cards=[
        card(1, rarity="Common", price=99),
        card(2, rarity="Legendary", price=10),
        card(3, rarity="Legendary", price=40),
        card(4, rarity="Rare", price=5),
        card(5, rarity="Mythic", price=1, stock=0),
    ])
    items = await get_popular_recommendations(ctx, limit=10)
    assert [i.card_id for i in items] == [3, 2, 4, 1]
    assert all(i.score == 0 for i in items)


async def test_units_sold_ranking(make_ctx):
    ctx = make_ctx(
        cards=[card(1), card(2), card(3), card(4, stock=0)],
        orders=[("a", [(2, 1), (3, 4)]), ("b", [(2, 5), (4, 10)])],
    )
    items = await get_popular_recommendations(ctx, limit=2)
    assert [i.card_id for i in items] == [2, 3]
    assert items[0].score == 6
    assert items[0].reasons == ["6 units sold"]
