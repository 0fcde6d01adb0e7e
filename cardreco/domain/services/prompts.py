from typing import Dict, List, Optional, Sequence

from cardreco.domain.models.card import CatalogItem, Customer, PurchaseLine, PurchaseRecord
from cardreco.domain.services.features import extract_features


def _money(value: float) -> str:
    return f"R$ {value:.2f}"


def candidate_row(card: CatalogItem) -> str:
    return f"{card.card_id} | {card.name} | {card.type} | {card.rarity} | {_money(card.price)} | {card.stock}"


def recommendation_prompt(
    customer: Optional[Customer],
    recent_lines: Sequence[PurchaseLine],
    candidates: Sequence[CatalogItem],
    limit: int,
) -> str:
    """Prompt asking for exactly `limit` candidate ids on a single `IDs:` line."""
    parts = [
        "You are a recommendation assistant for a collectible trading card store.",
        f"TASK: analyse the customer profile and recommend {limit} cards they are likely to buy.",
        "",
    ]

    if recent_lines:
        name = customer.name if customer else "unknown"
        parts.append("CUSTOMER PROFILE:")
        parts.append(f"- Name: {name}")
        parts.append("- Recent purchases:")
        for i, line in enumerate(recent_lines, 1):
            card = line.card
            if card is None:
                parts.append(f"{i}. card #{line.card_id} (quantity: {line.quantity})")
                continue
            parts.append(
                f"{i}. {card.name} (type: {card.type}, rarity: {card.rarity}, "
                f"price: {_money(line.unit_price)}, quantity: {line.quantity})"
            )
    else:
        parts.append("CUSTOMER PROFILE: new customer, no purchase history.")
    parts.append("")

    parts.append("AVAILABLE CARDS (id | name | type | rarity | price | stock):")
    parts.extend(candidate_row(c) for c in candidates)
    parts.append("")

    parts += [
        "RULES:",
        "1. Look for preferred types, rarities and price range in the purchase history (if any)",
        f"2. Recommend exactly {limit} cards that match the profile",
        "3. Prefer some variety of types and rarities when it fits",
        "4. Use ONLY ids from the list of available cards above",
        "5. Answer with ONE line of numeric ids separated by commas, no other text",
        '6. Mandatory format: "IDs: id1,id2,id3,..." (no spaces)',
        "",
        "EXAMPLE ANSWER:",
        "IDs: 1,5,12,23,45",
        "",
        "ANSWER:",
    ]
    return "\n".join(parts)


def _budget_hint(cards: Sequence[CatalogItem], limit: int = 6) -> str:
    budget = [c for c in cards if extract_features(c).price_bucket == "budget"]
    budget.sort(key=lambda c: (c.price, c.card_id))
    return ",".join(f"{c.card_id}({c.name}-{_money(c.price)})" for c in budget[:limit])


def chat_prompt(
    message: str,
    cards: Sequence[CatalogItem],
    history: Sequence[PurchaseRecord] = (),
) -> str:
    """Prompt for the conversational resolver; asks for a single-line JSON object."""
    types = sorted({c.type for c in cards})
    rarities = sorted({c.rarity for c in cards})
    by_type: Dict[str, List[str]] = {}
    for c in cards:
        by_type.setdefault(c.type, []).append(str(c.card_id))

    parts = [
        "You are a friendly shop assistant for a collectible trading card store.",
        "Talk naturally, be direct, and recommend cards that fit the question.",
        "",
        f"CATALOG ({len(cards)} cards, id:name(type)):",
        ",".join(f"{c.card_id}:{c.name}({c.type})" for c in cards),
        "",
        "CONTEXT HINTS:",
        f"- Types available: {', '.join(types)}",
        f"- Rarities available: {', '.join(rarities)}",
    ]
    parts.extend(f"- {t} cards: {','.join(ids[:8])}" for t, ids in sorted(by_type.items()))
    budget = _budget_hint(cards)
    if budget:
        parts.append(f"- Cheap / beginner friendly: {budget}")

    if history:
        parts.append("")
        parts.append("CUSTOMER HISTORY:")
        for i, order in enumerate(history, 1):
            bought = ", ".join(
                f"{ln.quantity}x {ln.card.name if ln.card else '#' + str(ln.card_id)}" for ln in order.lines
            )
            parts.append(f"Order {i} ({order.created_at:%Y-%m-%d}): {bought}")

    parts += [
        "",
        "RULES:",
        "- Respect any price range, type or rarity the customer asks for",
        "- Only use card ids from the catalog",
        "- Explain briefly WHY the cards fit the question",
        "",
        "FORMAT: answer ONLY with single-line JSON (no ``` fences):",
        '{"text":"your natural answer","cardIds":["17","18","19"]}',
        "",
        f"Customer question: {message}",
        "JSON:",
    ]
    return "\n".join(parts)
