import asyncio
import logging
import time
from typing import Dict, List, Optional

from cardreco.core.config import HybridSlot
from cardreco.domain.models.card import ScoredItem
from cardreco.domain.services.collaborative_svc import get_collaborative_recommendations
from cardreco.domain.services.constants import (
    STRATEGY_COLLABORATIVE,
    STRATEGY_CONTENT,
    STRATEGY_HISTORY,
    STRATEGY_POPULAR,
)
from cardreco.domain.services.content_svc import get_content_recommendations
from cardreco.domain.services.context import RecoContext
from cardreco.domain.services.history_svc import get_history_recommendations
from cardreco.domain.services.popular_svc import get_popular_recommendations

logger = logging.getLogger(__name__)


async def _empty() -> List[ScoredItem]:
    return []


def _slot_call(ctx: RecoContext, slot: HybridSlot, customer_id: Optional[str],
               reference_item_id: Optional[int], limit: int):
    """Coroutine for one fusion slot; customer/reference-scoped slots are empty without their input."""
    if slot.strategy == STRATEGY_HISTORY:
        return get_history_recommendations(ctx, customer_id, limit) if customer_id else _empty()
    if slot.strategy == STRATEGY_COLLABORATIVE:
        return get_collaborative_recommendations(ctx, customer_id, limit) if customer_id else _empty()
    if slot.strategy == STRATEGY_CONTENT:
        return get_content_recommendations(ctx, reference_item_id, limit) if reference_item_id is not None else _empty()
    if slot.strategy == STRATEGY_POPULAR:
        return get_popular_recommendations(ctx, limit)
    raise ValueError(f"Unknown hybrid slot strategy: {slot.strategy}")


def fuse(results: List[List[ScoredItem]], weights: List[float]):
    """
    Weighted score fusion. Returns (scores, reasons) keyed by card_id, both in
    first-appearance order; reasons are deduplicated.
    """
    scores: Dict[int, float] = {}
    reasons: Dict[int, List[str]] = {}
    for items, weight in zip(results, weights):
        for it in items:
            scores[it.card_id] = scores.get(it.card_id, 0.0) + it.score * weight
            merged = reasons.setdefault(it.card_id, [])
            for r in it.reasons:
                if r not in merged:
                    merged.append(r)
    return scores, reasons


async def get_hybrid_recommendations(
    ctx: RecoContext,
    customer_id: Optional[str],
    limit: int,
    reference_item_id: Optional[int] = None,
) -> List[ScoredItem]:
    """
    Runs every configured slot concurrently (each asked for 2 x limit), sums
    score x slot weight per card, re-fetches the in-stock cards and returns the
    top `limit`. Any slot failure cancels the other slots and fails the whole fusion.
    """
    t0 = time.perf_counter()
    slots = ctx.settings.hybrid_slots
    per_slot = limit * 2

    tasks = [
        asyncio.ensure_future(_slot_call(ctx, slot, customer_id, reference_item_id, per_slot))
        for slot in slots
    ]
    try:
        results = await asyncio.gather(*tasks)
    except Exception as e:
        # cancel sibling slots still reading storage
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.warning("hybrid slot failed customer_id=%s: %s: %s", customer_id, type(e).__name__, e)
        raise
    logger.debug(
        "hybrid slots customer_id=%s sizes=%s",
        customer_id, [(s.strategy, s.weight, len(r)) for s, r in zip(slots, results)],
    )

    scores, reasons = fuse(results, [s.weight for s in slots])
    if not scores:
        logger.info("hybrid no candidates customer_id=%s", customer_id)
        return []

    order = {card_id: i for i, card_id in enumerate(scores)}
    cards = await ctx.catalog.get_many(scores.keys(), in_stock_only=True)
    items = [
        ScoredItem(card=c, score=max(scores[c.card_id], 0.0), reasons=reasons[c.card_id])
        for c in cards
        if c.in_stock and c.card_id in scores
    ]
    items.sort(key=lambda s: (-s.score, order[s.card_id]))

    logger.info(
        "hybrid done customer_id=%s candidates=%s items=%s time=%.3fs",
        customer_id, len(scores), min(limit, len(items)), time.perf_counter() - t0,
    )
    return items[:limit]
