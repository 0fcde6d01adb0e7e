"""
Card-id extraction from free-form model output.

Each parser is a pure function `(text, candidates) -> list[int]`. They are
tried in PARSERS order; the first one that yields at least one id present in
the candidate set wins. `rarity_fallback` is the last resort and never fails
while candidates exist.
"""
from __future__ import annotations
from typing import Callable, Iterable, List, Sequence
import logging
import re

from cardreco.domain.models.card import CatalogItem
from cardreco.domain.services.features import rarity_rank

logger = logging.getLogger(__name__)

IdParser = Callable[[str, Sequence[CatalogItem]], List[int]]

_LABELED_STRICT_RE = re.compile(r"IDs?:\s*([\d,]+)", re.IGNORECASE)
_LABELED_LOOSE_RE = re.compile(r"IDs?:\s*([\d,\s]+)", re.IGNORECASE)
_COMMA_RUN_RE = re.compile(r"(\d+(?:\s*,\s*\d+){2,})")
_NUMBER_RE = re.compile(r"\b\d+\b")


def _split_ids(chunk: str) -> List[int]:
    return [int(p) for p in (s.strip() for s in chunk.split(",")) if p.isdigit()]


def parse_labeled_strict(text: str, candidates: Sequence[CatalogItem]) -> List[int]:
    """`IDs: 1,2,3`"""
    m = _LABELED_STRICT_RE.search(text)
    return _split_ids(m.group(1)) if m else []


def parse_labeled_loose(text: str, candidates: Sequence[CatalogItem]) -> List[int]:
    """`IDs: 1, 2 ,3` (whitespace inside the list)"""
    m = _LABELED_LOOSE_RE.search(text)
    return _split_ids(m.group(1)) if m else []


def parse_comma_run(text: str, candidates: Sequence[CatalogItem]) -> List[int]:
    """First run of at least three comma-separated numbers anywhere."""
    m = _COMMA_RUN_RE.search(text)
    return _split_ids(m.group(1)) if m else []


def parse_bare_numbers(text: str, candidates: Sequence[CatalogItem]) -> List[int]:
    """Every standalone number that happens to be a candidate id."""
    valid = {c.card_id for c in candidates}
    return [n for n in (int(tok) for tok in _NUMBER_RE.findall(text)) if n in valid]


def parse_name_mentions(text: str, candidates: Sequence[CatalogItem]) -> List[int]:
    """Candidates whose name appears in the text (case-insensitive), candidate order."""
    lowered = text.lower()
    return [c.card_id for c in candidates if c.name and c.name.lower() in lowered]


PARSERS: List[IdParser] = [
    parse_labeled_strict,
    parse_labeled_loose,
    parse_comma_run,
    parse_bare_numbers,
    parse_name_mentions,
]


def validate_ids(ids: Iterable[int], candidates: Sequence[CatalogItem], limit: int) -> List[int]:
    """Drop ids that are not candidates (model inventions) and duplicates; cap at limit."""
    valid = {c.card_id for c in candidates}
    out: List[int] = []
    for i in ids:
        if i in valid and i not in out:
            out.append(i)
            if len(out) >= limit:
                break
    return out


def rarity_fallback(candidates: Sequence[CatalogItem], limit: int) -> List[int]:
    ranked = sorted(candidates, key=lambda c: -rarity_rank(c.rarity))
    return [c.card_id for c in ranked[:limit]]


def extract_card_ids(text: str, candidates: Sequence[CatalogItem], limit: int) -> List[int]:
    """Run the parser cascade; falls back to the highest rarity tiers."""
    for parser in PARSERS:
        ids = validate_ids(parser(text, candidates), candidates, limit)
        if ids:
            logger.debug("id parser %s matched n=%s", parser.__name__, len(ids))
            return ids
    logger.info("no ids recognised in model output, using rarity fallback")
    return rarity_fallback(candidates, limit)
