import asyncio

import pytest

from cardreco.core.config import HybridSlot
from cardreco.domain.errors import CollaboratorUnavailable
from cardreco.domain.models.card import ScoredItem
from cardreco.domain.services.context import RecoContext
from cardreco.domain.services.hybrid_svc import fuse, get_hybrid_recommendations
from tests.fakes import FakeCatalog, FakeCustomers, FakeOrders, card

CARDS = [
    card(1, type="Water", rarity="Common", price=10),
    card(2, type="Water", rarity="Rare", price=12),
    card(3, type="Water", rarity="Common", price=11),
    card(4, type="Fire", rarity="Common", price=10),
    card(5, type="Grass", rarity="Legendary", price=300),
    card(6, type="Water", rarity="Common", price=10, stock=0),
]
ORDERS = [("me", [(1, 1)]), ("other", [(1, 1), (2, 3)]), ("third", [(3, 2), (4, 1)])]


def test_fuse_weights_and_merges_reasons():
    a, b = CARDS[0], CARDS[1]
    scores, reasons = fuse(
        [
            [ScoredItem(card=a, score=2.0, reasons=["x"]), ScoredItem(card=b, score=1.0, reasons=["y"])],
            [ScoredItem(card=a, score=1.0, reasons=["x", "z"])],
        ],
        [0.5, 2.0],
    )
    assert list(scores) == [1, 2]
    assert scores[1] == pytest.approx(3.0)
    assert scores[2] == pytest.approx(0.5)
    assert reasons[1] == ["x", "z"]


@pytest.mark.parametrize("limit", [1, 2, 3, 10])
async def test_scores_non_negative_and_bounded(make_ctx, limit):
    ctx = make_ctx(cards=CARDS, orders=ORDERS)
    items = await get_hybrid_recommendations(ctx, "me", limit)
    assert len(items) <= limit
    assert all(i.score >= 0 for i in items)
    assert all(i.card.stock > 0 for i in items)
    assert [i.score for i in items] == sorted((i.score for i in items), reverse=True)


async def test_anonymous_uses_popular_slot_only(make_ctx):
    ctx = make_ctx(cards=CARDS, orders=ORDERS)
    items = await get_hybrid_recommendations(ctx, None, 3)
    assert [i.card_id for i in items] == [2, 1, 3]
    assert items[0].score == pytest.approx(3 * 0.2)


async def test_configurable_content_slot(make_ctx):
    ctx = make_ctx(cards=CARDS, hybrid_slots=[HybridSlot(strategy="content", weight=1.0)])
    items = await get_hybrid_recommendations(ctx, None, 3, reference_item_id=1)
    ids = [i.card_id for i in items]
    assert 1 not in ids
    assert ids[0] == 3
    assert await get_hybrid_recommendations(ctx, None, 3) == []


class BrokenPeersOrders(FakeOrders):
    """Customer-wide purchase scan fails once a slow popularity read is under way."""

    def __init__(self, catalog, orders):
        super().__init__(catalog, orders)
        self.popular_started = asyncio.Event()
        self.popular_cancelled = False

    async def list_all_lines(self):
        self.popular_started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.popular_cancelled = True
            raise
        return await super().list_all_lines()

    async def list_customer_purchases(self, exclude_customer_id=None):
        await self.popular_started.wait()
        raise CollaboratorUnavailable("order_history", "list_customer_purchases", RuntimeError("connection reset"))


async def test_slot_failure_fails_fusion_and_cancels_other_slots(settings):
    catalog = FakeCatalog(CARDS)
    orders = BrokenPeersOrders(catalog, ORDERS)
    ctx = RecoContext(catalog=catalog, orders=orders, customers=FakeCustomers(), settings=settings)

    with pytest.raises(CollaboratorUnavailable) as exc:
        await asyncio.wait_for(get_hybrid_recommendations(ctx, "me", 3), timeout=5)
    assert exc.value.operation == "list_customer_purchases"
    assert orders.popular_cancelled
