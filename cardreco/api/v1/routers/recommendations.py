# cardreco/api/v1/routers/recommendations.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Annotated, Optional
import time
import logging

from cardreco.api.deps import reco_context
from cardreco.api.v1.schemas.reco import RecommendationResponse
from cardreco.domain.services.constants import STRATEGY_CONTENT, STRATEGY_HYBRID
from cardreco.domain.services.context import RecoContext
from cardreco.domain.services.recommendation_svc import get_recommendations

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recommendations"])

StrategyParam = Annotated[str, Query(
    pattern="^(content|collaborative|history|popular|hybrid|generative)$",
    description="content | collaborative | history | popular | hybrid | generative",
)]


async def _run(ctx: RecoContext, strategy: str, customer_id: Optional[str],
               reference_item_id: Optional[int], limit: Optional[int]) -> dict:
    limit = min(limit or ctx.settings.default_limit, ctx.settings.max_limit)
    logger.info(
        "Request: recommendations strategy=%s, customer_id=%s, reference_item_id=%s, limit=%s",
        strategy, customer_id, reference_item_id, limit,
    )
    start_time = time.perf_counter()
    try:
        res = await get_recommendations(
            ctx, strategy,
            customer_id=customer_id,
            reference_item_id=reference_item_id,
            limit=limit,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    elapsed_time = time.perf_counter() - start_time
    logger.info(
        "Response: recommendations strategy=%s, count=%s, elapsed_time=%.4fs",
        strategy, res.count, elapsed_time,
    )
    return RecommendationResponse.from_domain(res).model_dump()


@router.get("/recommendations")
async def recommendations(
    strategy: StrategyParam = STRATEGY_HYBRID,
    customer_id: Optional[str] = Query(None),
    reference_item_id: Optional[int] = Query(None, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=50),
    ctx: RecoContext = Depends(reco_context),
):
    """
    Ranked cards for any strategy.
    `content` needs reference_item_id; `collaborative`/`history` without a customer
    degrade to popularity.
    """
    return await _run(ctx, strategy, customer_id, reference_item_id, limit)


@router.get("/cards/{card_id}/similar")
async def similar_cards(
    card_id: int,
    limit: Optional[int] = Query(None, ge=1, le=50),
    ctx: RecoContext = Depends(reco_context),
):
    """Content-based neighbours of one card (empty when the card is unknown)."""
    return await _run(ctx, STRATEGY_CONTENT, None, card_id, limit)


@router.get("/customers/{customer_id}/recommendations")
async def customer_recommendations(
    customer_id: str,
    strategy: StrategyParam = STRATEGY_HYBRID,
    limit: Optional[int] = Query(None, ge=1, le=50),
    ctx: RecoContext = Depends(reco_context),
):
    return await _run(ctx, strategy, customer_id, None, limit)
