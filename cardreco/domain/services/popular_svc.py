import logging
import time
from typing import Dict, List

from cardreco.domain.models.card import ScoredItem
from cardreco.domain.services.constants import REASON_POPULAR
from cardreco.domain.services.context import RecoContext
from cardreco.domain.services.features import rarity_rank

logger = logging.getLogger(__name__)


async def get_popular_recommendations(ctx: RecoContext, limit: int) -> List[ScoredItem]:
    """
    In-stock cards by total units sold across all orders.
    With no sales at all, falls back to rarity tier desc, then price desc.
    """
    t0 = time.perf_counter()
    logger.info("popular start limit=%s", limit)

    units: Dict[int, int] = {}
    for line in await ctx.orders.list_all_lines():
        units[line.card_id] = units.get(line.card_id, 0) + line.quantity

    cards = await ctx.catalog.list_in_stock()

    if not units:
        cards = sorted(cards, key=lambda c: (-rarity_rank(c.rarity), -c.price, c.card_id))
        items = [ScoredItem(card=c, score=0.0, reasons=[REASON_POPULAR]) for c in cards[:limit]]
        logger.info("popular done (no sales, static order) items=%s time=%.3fs", len(items), time.perf_counter() - t0)
        return items

    scored = []
    for c in cards:
        n = units.get(c.card_id, 0)
        scored.append(ScoredItem(card=c, score=float(n), reasons=[f"{n} units sold" if n else REASON_POPULAR]))
    scored.sort(key=lambda s: (-s.score, s.card_id))

    logger.info(
        "popular done sold_cards=%s items=%s time=%.3fs",
        len(units), min(limit, len(scored)), time.perf_counter() - t0,
    )
    return scored[:limit]
