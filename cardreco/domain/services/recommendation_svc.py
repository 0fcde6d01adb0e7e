import logging
import time
from typing import List, Optional

from cardreco.domain.models.card import RecommendationResult, ScoredItem
from cardreco.domain.services.collaborative_svc import get_collaborative_recommendations
from cardreco.domain.services.constants import (
    ALL_STRATEGIES,
    STRATEGY_COLLABORATIVE,
    STRATEGY_CONTENT,
    STRATEGY_GENERATIVE,
    STRATEGY_HISTORY,
    STRATEGY_HYBRID,
    STRATEGY_POPULAR,
)
from cardreco.domain.services.content_svc import get_content_recommendations
from cardreco.domain.services.context import RecoContext
from cardreco.domain.services.generative_svc import get_generative_recommendations
from cardreco.domain.services.history_svc import get_history_recommendations
from cardreco.domain.services.hybrid_svc import get_hybrid_recommendations
from cardreco.domain.services.popular_svc import get_popular_recommendations

logger = logging.getLogger(__name__)


async def get_recommendations(
    ctx: RecoContext,
    strategy: str,
    customer_id: Optional[str] = None,
    reference_item_id: Optional[int] = None,
    limit: int = 10,
) -> RecommendationResult:
    """Single entry point for every strategy."""
    if strategy not in ALL_STRATEGIES:
        raise ValueError(f"Unknown strategy: {strategy}")

    t0 = time.perf_counter()
    items: List[ScoredItem]
    if strategy == STRATEGY_CONTENT:
        items = await get_content_recommendations(ctx, reference_item_id, limit) if reference_item_id is not None else []
    elif strategy == STRATEGY_COLLABORATIVE:
        items = (
            await get_collaborative_recommendations(ctx, customer_id, limit)
            if customer_id else await get_popular_recommendations(ctx, limit)
        )
    elif strategy == STRATEGY_HISTORY:
        items = (
            await get_history_recommendations(ctx, customer_id, limit)
            if customer_id else await get_popular_recommendations(ctx, limit)
        )
    elif strategy == STRATEGY_POPULAR:
        items = await get_popular_recommendations(ctx, limit)
    elif strategy == STRATEGY_HYBRID:
        items = await get_hybrid_recommendations(ctx, customer_id, limit, reference_item_id)
    else:
        assert strategy == STRATEGY_GENERATIVE
        items = await get_generative_recommendations(ctx, customer_id, limit)

    logger.info(
        "recommendations strategy=%s customer_id=%s reference=%s items=%s time=%.3fs",
        strategy, customer_id, reference_item_id, len(items), time.perf_counter() - t0,
    )
    return RecommendationResult(
        strategy=strategy,
        customer_id=customer_id,
        reference_item_id=reference_item_id,
        items=items,
        count=len(items),
    )
