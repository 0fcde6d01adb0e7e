import logging
import time
from typing import Dict, List, Tuple

from cardreco.domain.models.card import CustomerPurchases, ScoredItem
from cardreco.domain.services.constants import REASON_SIMILAR_CUSTOMERS
from cardreco.domain.services.context import RecoContext
from cardreco.domain.services.popular_svc import get_popular_recommendations
from cardreco.domain.services.similarity import jaccard_similarity

logger = logging.getLogger(__name__)


def nearest_neighbors(
    target_ids: frozenset,
    others: List[CustomerPurchases],
    k: int,
) -> List[Tuple[CustomerPurchases, float]]:
    """
    Top-k other customers by Jaccard similarity of purchased-item sets.
    Only similarity > 0 qualifies; ties resolve by customer_id ascending.
    """
    scored = []
    for other in others:
        sim = jaccard_similarity(target_ids, other.card_ids)
        if sim > 0:
            scored.append((other, sim))
    scored.sort(key=lambda t: (-t[1], t[0].customer_id))
    return scored[:k]


def accumulate_neighbor_scores(
    target_ids: frozenset,
    neighbors: List[Tuple[CustomerPurchases, float]],
) -> Dict[int, float]:
    """Each unbought item of each neighbour earns that neighbour's similarity; scores sum."""
    scores: Dict[int, float] = {}
    for other, sim in neighbors:
        for card_id in other.card_ids:
            if card_id not in target_ids:
                scores[card_id] = scores.get(card_id, 0.0) + sim
    return scores


async def get_collaborative_recommendations(ctx: RecoContext, customer_id: str, limit: int) -> List[ScoredItem]:
    """User-based collaborative filtering. Customers without orders get the popularity ranking."""
    t0 = time.perf_counter()
    records = await ctx.orders.list_for_customer(customer_id)
    if not records:
        logger.info("collaborative no history customer_id=%s -> popular", customer_id)
        return await get_popular_recommendations(ctx, limit)

    target_ids = frozenset(line.card_id for r in records for line in r.lines)
    others = await ctx.orders.list_customer_purchases(exclude_customer_id=customer_id)
    others = [o for o in others if o.customer_id != customer_id]

    neighbors = nearest_neighbors(target_ids, others, ctx.settings.collaborative_neighbors)
    scores = accumulate_neighbor_scores(target_ids, neighbors)
    logger.debug(
        "collaborative customer_id=%s neighbors=%s",
        customer_id, [(n.customer_id, round(s, 3)) for n, s in neighbors],
    )
    if not scores:
        logger.info("collaborative no candidates customer_id=%s others=%s", customer_id, len(others))
        return []

    cards = await ctx.catalog.get_many(scores.keys(), in_stock_only=True)
    items = [
        ScoredItem(card=c, score=scores[c.card_id], reasons=[REASON_SIMILAR_CUSTOMERS])
        for c in cards
        if c.in_stock and c.card_id in scores
    ]
    items.sort(key=lambda s: (-s.score, s.card_id))

    logger.info(
        "collaborative done customer_id=%s neighbors=%s candidates=%s items=%s time=%.3fs",
        customer_id, len(neighbors), len(scores), min(limit, len(items)), time.perf_counter() - t0,
    )
    return items[:limit]
