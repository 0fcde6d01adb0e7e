# cardreco/domain/services/chat_svc.py

from __future__ import annotations
from typing import List, Optional, Sequence
import json
import logging
import re
import time

from pydantic import BaseModel, Field, ValidationError, field_validator

from cardreco.domain.errors import GenerationFailed
from cardreco.domain.models.card import CatalogItem, ChatResult, PurchaseRecord, ScoredItem
from cardreco.domain.services.chat_filters import QueryConstraints, detect_constraints
from cardreco.domain.services.constants import GENERATIVE_SCORE_STEP
from cardreco.domain.services.context import RecoContext
from cardreco.domain.services.id_parsers import parse_name_mentions
from cardreco.domain.services.prompts import chat_prompt

logger = logging.getLogger(__name__)

REASON_ASSISTANT = "suggested by the assistant"
REASON_NAMED = "mentioned by name"
FALLBACK_TEXT = "Here are some cards from our catalog that may interest you."
EMPTY_TEXT = "Sorry, I could not find cards matching your request right now."

# ---------- Reply parsing ----------

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)
_LEADING_JSON_RE = re.compile(r"^json\s*", re.IGNORECASE)
_REPLY_RE = re.compile(
    r'"text"\s*:\s*"((?:[^"\\]|\\.)*)"\s*,\s*"cardIds"\s*:\s*\[([^\]]*)\]',
    re.DOTALL,
)


class ChatReply(BaseModel):
    text: str = ""
    card_ids: List[str] = Field(default_factory=list, alias="cardIds")

    model_config = {"populate_by_name": True}

    @field_validator("card_ids", mode="before")
    @classmethod
    def _stringify(cls, v):
        # models mix "17", 17, ["17"] and "17,18"
        if v is None:
            return []
        if isinstance(v, (str, int)):
            v = str(v).split(",")
        return [s for s in (str(x).strip() for x in v) if s]


def _strip_fences(s: str) -> str:
    """Remove ``` or ```json fences and a bare leading `json` tag."""
    return _LEADING_JSON_RE.sub("", _CODE_FENCE_RE.sub("", s).strip()).strip()


def _parse_json(cleaned: str) -> Optional[ChatReply]:
    try:
        parsed = json.loads(cleaned)
        if not isinstance(parsed, dict):
            return None
        return ChatReply.model_validate(parsed)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.debug("chat reply is not valid JSON: %s", e)
        return None


def _parse_regex(cleaned: str) -> Optional[ChatReply]:
    m = _REPLY_RE.search(cleaned)
    if not m:
        return None
    try:
        text = json.loads(f'"{m.group(1)}"')
    except json.JSONDecodeError:
        text = m.group(1)
    ids = [p.strip().strip('"').strip("'") for p in m.group(2).split(",")]
    return ChatReply(text=text, card_ids=[i for i in ids if i])


def parse_chat_reply(raw: str) -> ChatReply:
    """JSON first, then a narrow regex for the two fields, else the raw text with no ids."""
    cleaned = _strip_fences(raw or "")
    for parser in (_parse_json, _parse_regex):
        reply = parser(cleaned)
        if reply is not None:
            return reply
    logger.info("chat reply unparseable, using raw text")
    return ChatReply(text=cleaned)


# ---------- Deterministic correction ----------

def _resolve_picks(reply: ChatReply, catalog: Sequence[CatalogItem]) -> List[CatalogItem]:
    by_id = {str(c.card_id): c for c in catalog}
    out: List[CatalogItem] = []
    for raw_id in reply.card_ids:
        card = by_id.get(raw_id)
        if card is not None and card not in out:
            out.append(card)
    return out


def _named_picks(reply: Optional[ChatReply], message: str, catalog: Sequence[CatalogItem]) -> List[CatalogItem]:
    """Catalog cards whose name appears in the reply text or the customer message."""
    text = f"{reply.text if reply else ''}\n{message}"
    by_id = {c.card_id: c for c in catalog}
    return [by_id[i] for i in parse_name_mentions(text, catalog)]


def apply_constraints(
    picks: List[CatalogItem],
    catalog: Sequence[CatalogItem],
    constraints: QueryConstraints,
    max_cards: int,
) -> List[CatalogItem]:
    """
    Model picks are advisory. With a price range or type detected, a pick set
    with any violation is replaced by every catalog item satisfying both;
    otherwise it is completed with the remaining satisfying items. Empty
    results fall back to type search, rarity search (both within the price
    range), then a catalog slice.
    """
    matching = [c for c in catalog if constraints.hard_ok(c)]

    if constraints.has_hard_constraints and picks:
        if constraints.has_price_range and not all(constraints.price_ok(c) for c in picks):
            logger.info("chat price pass: picks outside range, replacing")
            picks = list(matching)
        elif constraints.card_type and not all(constraints.type_ok(c) for c in picks):
            logger.info("chat type pass: picks of wrong type, replacing")
            picks = list(matching)
        else:
            picks = picks + [c for c in matching if c not in picks]

    if not picks:
        if constraints.card_type:
            picks = matching
        if not picks and constraints.rarity:
            picks = [c for c in catalog if constraints.rarity_ok(c) and constraints.price_ok(c)]
        if not picks:
            picks = [c for c in catalog if constraints.price_ok(c)]

    return picks[:max_cards]


def _fallback_text(constraints: QueryConstraints, cards: Sequence[CatalogItem]) -> str:
    if not cards:
        return EMPTY_TEXT
    if constraints.card_type:
        return f"Here are some {constraints.card_type} cards you may like."
    if constraints.rarity:
        return f"Here are some {constraints.rarity} cards you may like."
    return FALLBACK_TEXT


async def _ask_model(ctx: RecoContext, prompt: str) -> Optional[ChatReply]:
    if ctx.completer is None:
        return None
    try:
        raw = await ctx.completer.complete(prompt)
    except GenerationFailed as e:
        logger.warning("chat model failed: %s", e)
        return None
    except Exception as e:
        logger.warning("chat model failed: %s: %s", type(e).__name__, e)
        return None
    logger.debug("chat raw response: %s", (raw or "")[:500])
    return parse_chat_reply(raw)


async def resolve(ctx: RecoContext, message: str, customer_id: Optional[str] = None) -> ChatResult:
    """Answer a free-form question with text plus catalog cards honouring explicit constraints."""
    t0 = time.perf_counter()
    settings = ctx.settings

    catalog = await ctx.catalog.list_in_stock(limit=settings.chat_catalog_limit)
    history: List[PurchaseRecord] = []
    if customer_id:
        history = await ctx.orders.list_for_customer(customer_id, limit=settings.chat_history_orders)

    constraints = detect_constraints(message)
    logger.info("chat request customer_id=%s constraints=%s catalog=%s", customer_id, constraints, len(catalog))

    reply = await _ask_model(ctx, chat_prompt(message, catalog, history))
    picks = _resolve_picks(reply, catalog) if reply else []
    suggested = {c.card_id for c in picks}
    named: set = set()
    if not picks:
        picks = _named_picks(reply, message, catalog)
        named = {c.card_id for c in picks}
        if picks:
            logger.info("chat no ids in reply, matched names=%s", sorted(named))

    cards = apply_constraints(picks, catalog, constraints, settings.chat_max_cards)

    items: List[ScoredItem] = []
    for i, card in enumerate(cards):
        reasons = [REASON_ASSISTANT] if card.card_id in suggested else []
        if card.card_id in named:
            reasons.append(REASON_NAMED)
        reasons += constraints.describe(card)
        items.append(ScoredItem(card=card, score=max(0.0, 1.0 - i * GENERATIVE_SCORE_STEP), reasons=reasons))

    text = reply.text.strip() if reply and reply.text.strip() else _fallback_text(constraints, cards)

    logger.info(
        "chat done customer_id=%s model=%s picks=%s items=%s time=%.3fs",
        customer_id, reply is not None, len(picks), len(items), time.perf_counter() - t0,
    )
    return ChatResult(text=text, items=items)
