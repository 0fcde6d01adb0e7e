"""
Deterministic constraint detection for chat messages (English and Portuguese).

Generated answers often ignore explicit price ranges or card types; the
resolver uses these constraints to override the model's picks.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import re

from cardreco.domain.models.card import CatalogItem

# "1.000,00" (pt-BR thousands) before plain "99,90" / "12.5"
_NUM = r"(?:r\$|\$)?\s*(\d{1,3}(?:\.\d{3})+(?:,\d+)?(?!\d)|\d+(?:[.,]\d+)?)"
_THOUSANDS_RE = re.compile(r"\d{1,3}(?:\.\d{3})+(?:,\d+)?")

# explicit ranges win; otherwise one lower and one upper bound combine
_RANGE_PATTERNS: List[re.Pattern] = [
    re.compile(rf"\bbetween\s+{_NUM}\s+and\s+{_NUM}"),
    re.compile(rf"\bentre\s+{_NUM}\s+e\s+{_NUM}"),
    re.compile(rf"{_NUM}\s+(?:a|to)\s+{_NUM}\s*(?:reais|real|dollars?|bucks)\b"),
]
_MAX_PATTERNS: List[re.Pattern] = [
    re.compile(rf"\b(?:up\s+to|até|ate|at\s+most|no\s+more\s+than)\s+{_NUM}"),
    re.compile(rf"\b(?:under|below|less\s+than|menos\s+de|abaixo\s+de)\s+{_NUM}"),
]
_MIN_PATTERNS: List[re.Pattern] = [
    re.compile(rf"\b(?:above|over|(?<!no )more\s+than|acima\s+de|mais\s+de|a\s+partir\s+de)\s+{_NUM}"),
]

TYPE_KEYWORDS: Dict[str, List[str]] = {
    "fire": ["fogo", "fire", "chamas", "queima"],
    "water": ["água", "agua", "water", "mar", "oceano", "ocean"],
    "electric": ["elétrico", "eletrico", "electric", "raio", "trovão", "trovao", "lightning"],
    "grass": ["grama", "grass", "planta", "folha", "plant"],
    "psychic": ["psíquico", "psiquico", "psychic", "mental"],
    "fighting": ["luta", "fighting", "lutador"],
    "flying": ["voador", "flying", "voo"],
    "poison": ["veneno", "poison"],
    "ground": ["terra", "ground"],
    "rock": ["pedra", "rock"],
    "bug": ["inseto", "bug"],
    "ghost": ["fantasma", "ghost"],
    "steel": ["aço", "aco", "steel"],
    "ice": ["gelo", "ice"],
    "dragon": ["dragão", "dragao", "dragon"],
    "dark": ["dark", "sombrio", "noturno", "trevas"],
    "fairy": ["fada", "fairy"],
    "normal": ["normal"],
}

RARITY_KEYWORDS: Dict[str, List[str]] = {
    "common": ["comum", "comuns", "common"],
    "uncommon": ["incomum", "incomuns", "uncommon"],
    "rare": ["rara", "raras", "raro", "raros", "rare"],
    "legendary": ["lendária", "lendaria", "lendárias", "lendarias", "lendário", "lendario", "lendários", "lendarios", "legendary"],
    "mythic": ["mítica", "mitica", "míticas", "miticas", "mythic"],
    "epic": ["épica", "epica", "épicas", "epicas", "epic"],
}


def _to_float(s: str) -> float:
    if _THOUSANDS_RE.fullmatch(s):
        s = s.replace(".", "")
    return float(s.replace(",", "."))


def _mentions(text: str, words: List[str]) -> bool:
    return any(re.search(rf"\b{re.escape(w)}\b", text) for w in words)


def _first(patterns: List[re.Pattern], text: str) -> Optional[float]:
    for pattern in patterns:
        m = pattern.search(text)
        if m:
            return _to_float(m.group(1))
    return None


def detect_price_range(text: str) -> Tuple[Optional[float], Optional[float]]:
    """(min, max) price asked for; either side may be None."""
    lowered = text.lower()
    for pattern in _RANGE_PATTERNS:
        m = pattern.search(lowered)
        if m:
            lo, hi = sorted((_to_float(m.group(1)), _to_float(m.group(2))))
            return lo, hi
    lo, hi = _first(_MIN_PATTERNS, lowered), _first(_MAX_PATTERNS, lowered)
    if lo is not None and hi is not None and lo > hi:
        lo, hi = hi, lo
    return lo, hi


def detect_keyword(text: str, table: Dict[str, List[str]]) -> Optional[str]:
    lowered = text.lower()
    for key, words in table.items():
        if _mentions(lowered, words):
            return key
    return None


@dataclass(frozen=True)
class QueryConstraints:
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    card_type: Optional[str] = None
    rarity: Optional[str] = None

    @property
    def has_price_range(self) -> bool:
        return self.min_price is not None or self.max_price is not None

    @property
    def has_hard_constraints(self) -> bool:
        return self.has_price_range or self.card_type is not None

    def price_ok(self, card: CatalogItem) -> bool:
        if self.min_price is not None and card.price < self.min_price:
            return False
        if self.max_price is not None and card.price > self.max_price:
            return False
        return True

    def type_ok(self, card: CatalogItem) -> bool:
        return self.card_type is None or self.card_type in card.type.lower()

    def rarity_ok(self, card: CatalogItem) -> bool:
        return self.rarity is None or card.rarity.lower() == self.rarity

    def hard_ok(self, card: CatalogItem) -> bool:
        return self.price_ok(card) and self.type_ok(card)

    def describe(self, card: CatalogItem) -> List[str]:
        """Reasons a card satisfies the detected constraints."""
        reasons = []
        if self.card_type is not None and self.type_ok(card):
            reasons.append(f"matches requested type {self.card_type}")
        if self.rarity is not None and self.rarity_ok(card):
            reasons.append(f"matches requested rarity {self.rarity}")
        if self.has_price_range and self.price_ok(card):
            if self.min_price is not None and self.max_price is not None:
                reasons.append(f"price between R$ {self.min_price:.2f} and R$ {self.max_price:.2f}")
            elif self.max_price is not None:
                reasons.append(f"price up to R$ {self.max_price:.2f}")
            else:
                reasons.append(f"price above R$ {self.min_price:.2f}")
        return reasons


def detect_constraints(message: str) -> QueryConstraints:
    lo, hi = detect_price_range(message)
    return QueryConstraints(
        min_price=lo,
        max_price=hi,
        card_type=detect_keyword(message, TYPE_KEYWORDS),
        rarity=detect_keyword(message, RARITY_KEYWORDS),
    )
