import logging
import time
from typing import List

from cardreco.domain.models.card import CatalogItem, CustomerProfile, ScoredItem
from cardreco.domain.services.constants import (
    HISTORY_CANDIDATE_BAND,
    HISTORY_PRICE_POINTS,
    HISTORY_RARITY_POINTS,
    HISTORY_SCORING_BAND,
    HISTORY_TYPE_POINTS,
    REASON_PRICE_RANGE,
)
from cardreco.domain.services.context import RecoContext
from cardreco.domain.services.popular_svc import get_popular_recommendations

logger = logging.getLogger(__name__)


def _in_band(price: float, profile: CustomerProfile, band) -> bool:
    lo, hi = band
    return profile.min_price * lo <= price <= profile.max_price * hi


def is_candidate(card: CatalogItem, profile: CustomerProfile) -> bool:
    """Unbought, in stock, and matching favourite type OR rarity OR the widened price band."""
    if not card.in_stock or card.card_id in profile.purchased_ids:
        return False
    return (
        card.type == profile.favorite_type
        or card.rarity == profile.favorite_rarity
        or _in_band(card.price, profile, HISTORY_CANDIDATE_BAND)
    )


def score_candidate(card: CatalogItem, profile: CustomerProfile) -> ScoredItem:
    score = 0
    reasons = []
    if card.type == profile.favorite_type:
        score += HISTORY_TYPE_POINTS
        reasons.append(f"you like {profile.favorite_type} cards")
    if card.rarity == profile.favorite_rarity:
        score += HISTORY_RARITY_POINTS
        reasons.append(f"you prefer {profile.favorite_rarity} cards")
    if _in_band(card.price, profile, HISTORY_SCORING_BAND):
        score += HISTORY_PRICE_POINTS
        reasons.append(REASON_PRICE_RANGE)
    return ScoredItem(card=card, score=float(score), reasons=reasons)


async def get_history_recommendations(ctx: RecoContext, customer_id: str, limit: int) -> List[ScoredItem]:
    """
    Unbought cards scored against the customer's favourite type (+3), favourite
    rarity (+2) and usual price range (+1). No history -> popularity ranking.
    Ties resolve by card_id ascending.
    """
    t0 = time.perf_counter()
    records = await ctx.orders.list_for_customer(customer_id)
    profile = CustomerProfile.from_history(records)
    if profile is None:
        logger.info("history no history customer_id=%s -> popular", customer_id)
        return await get_popular_recommendations(ctx, limit)

    logger.debug(
        "history profile customer_id=%s fav_type=%s fav_rarity=%s price=[%.2f, %.2f] purchased=%s",
        customer_id, profile.favorite_type, profile.favorite_rarity,
        profile.min_price, profile.max_price, len(profile.purchased_ids),
    )

    cards = await ctx.catalog.list_in_stock(exclude_ids=profile.purchased_ids)
    scored = [score_candidate(c, profile) for c in cards if is_candidate(c, profile)]
    scored.sort(key=lambda s: (-s.score, s.card_id))

    logger.info(
        "history done customer_id=%s candidates=%s items=%s time=%.3fs",
        customer_id, len(scored), min(limit, len(scored)), time.perf_counter() - t0,
    )
    return scored[:limit]
