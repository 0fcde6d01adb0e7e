# cardreco/domain/services/generative_svc.py

from __future__ import annotations
from typing import List, Optional
import logging
import time

from cardreco.domain.errors import GenerationFailed
from cardreco.domain.models.card import CatalogItem, PurchaseLine, ScoredItem
from cardreco.domain.services.constants import (
    GENERATIVE_SCORE_STEP,
    REASON_AI,
    REASON_AI_HISTORY,
    REASON_AI_NO_HISTORY,
)
from cardreco.domain.services.context import RecoContext
from cardreco.domain.services.hybrid_svc import get_hybrid_recommendations
from cardreco.domain.services.id_parsers import extract_card_ids
from cardreco.domain.services.prompts import recommendation_prompt

logger = logging.getLogger(__name__)


def _positional_score(position: int) -> float:
    return max(0.0, 1.0 - position * GENERATIVE_SCORE_STEP)


async def _load_customer_context(ctx: RecoContext, customer_id: Optional[str]):
    """Customer, most recent purchase lines, and every purchased id."""
    if not customer_id:
        return None, [], set()
    customer = await ctx.customers.get_by_customer_id(customer_id)
    records = await ctx.orders.list_for_customer(customer_id)
    lines: List[PurchaseLine] = [ln for r in records for ln in r.lines]
    purchased = {ln.card_id for ln in lines}
    return customer, lines[: ctx.settings.generative_history_lines], purchased


async def _ask_model(ctx: RecoContext, prompt: str) -> str:
    if ctx.completer is None:
        raise GenerationFailed("no text completer configured")
    try:
        return await ctx.completer.complete(prompt)
    except GenerationFailed:
        raise
    except Exception as e:
        # providers raise their own transport/quota errors
        raise GenerationFailed(f"{type(e).__name__}: {e}") from e


async def get_generative_recommendations(ctx: RecoContext, customer_id: Optional[str], limit: int) -> List[ScoredItem]:
    """
    LLM-assisted ranking:
      1) Build a prompt from the customer's recent purchases and up to N unbought in-stock cards.
      2) One completion call (no retry).
      3) Parse ids through the parser cascade, keep only real candidates.
      4) Re-fetch in-stock cards in the model's order; backfill any shortfall from hybrid.
    Completer missing/failing or no candidates -> hybrid, never an error.
    """
    t0 = time.perf_counter()
    customer, recent_lines, purchased = await _load_customer_context(ctx, customer_id)
    has_history = bool(recent_lines)

    candidates: List[CatalogItem] = await ctx.catalog.list_in_stock(
        exclude_ids=purchased, limit=ctx.settings.generative_candidate_limit,
    )
    if not candidates:
        logger.info("generative no candidates customer_id=%s -> hybrid", customer_id)
        return await get_hybrid_recommendations(ctx, customer_id, limit)

    prompt = recommendation_prompt(customer, recent_lines, candidates, limit)
    logger.info("generative prompt customer_id=%s candidates=%s history_lines=%s", customer_id, len(candidates), len(recent_lines))
    logger.debug("generative prompt preview: %s", prompt[:2000])

    try:
        text = await _ask_model(ctx, prompt)
    except GenerationFailed as e:
        logger.warning("generative model unavailable customer_id=%s err=%s -> hybrid", customer_id, e)
        return await get_hybrid_recommendations(ctx, customer_id, limit)
    logger.debug("generative raw response: %s", text[:500])

    ids = extract_card_ids(text, candidates, limit)
    fetched = {c.card_id: c for c in await ctx.catalog.get_many(ids, in_stock_only=True) if c.in_stock}
    picked = [fetched[i] for i in ids if i in fetched]

    reasons = [REASON_AI, REASON_AI_HISTORY if has_history else REASON_AI_NO_HISTORY]
    items = [ScoredItem(card=c, score=_positional_score(i), reasons=reasons) for i, c in enumerate(picked)]

    if len(items) < limit:
        logger.info("generative resolved %s/%s, backfilling from hybrid", len(items), limit)
        seen = {it.card_id for it in items}
        for extra in await get_hybrid_recommendations(ctx, customer_id, limit):
            if len(items) >= limit:
                break
            if extra.card_id in seen:
                continue
            seen.add(extra.card_id)
            items.append(ScoredItem(card=extra.card, score=_positional_score(len(items)), reasons=extra.reasons))

    logger.info(
        "generative done customer_id=%s model_picks=%s items=%s time=%.3fs",
        customer_id, len(picked), len(items), time.perf_counter() - t0,
    )
    return items[:limit]
