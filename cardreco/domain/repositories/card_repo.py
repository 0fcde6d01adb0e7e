# cardreco/domain/repositories/card_repo.py

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from cardreco.domain.errors import CollaboratorUnavailable
from cardreco.domain.models.card import CatalogItem

logger = logging.getLogger(__name__)

_PROJECTION = {
    "_id": 0,
    "card_id": 1,
    "name": 1,
    "type": 1,
    "rarity": 1,
    "price": 1,
    "stock": 1,
    "description": 1,
    "image_url": 1,
}


def card_from_doc(doc: Dict[str, Any]) -> Optional[CatalogItem]:
    """Validate a card document; undecodable documents are logged and dropped."""
    try:
        return CatalogItem.model_validate(doc)
    except ValidationError as e:
        logger.warning("card decode error card_id=%s err=%s", doc.get("card_id"), e)
        return None


class CardRepo:
    """
    Catalog collaborator backed by the 'cards' collection:
      { card_id, name, type, rarity, price, stock, description, image_url }
    Read-only. Every query failure is raised as CollaboratorUnavailable.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "cards"):
        self.col = db[collection_name]

    async def _find(self, query: Dict[str, Any], limit: Optional[int] = None) -> List[CatalogItem]:
        try:
            cursor = self.col.find(query, _PROJECTION).sort("card_id", 1)
            if limit:
                cursor = cursor.limit(limit)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise CollaboratorUnavailable("catalog", "find", e) from e
        return [c for c in (card_from_doc(d) for d in docs) if c is not None]

    async def get_by_card_id(self, card_id: int) -> Optional[CatalogItem]:
        try:
            doc = await self.col.find_one({"card_id": card_id}, _PROJECTION)
        except PyMongoError as e:
            raise CollaboratorUnavailable("catalog", "get_by_card_id", e) from e
        return card_from_doc(doc) if doc else None

    async def list_in_stock(
        self,
        exclude_ids: Optional[Iterable[int]] = None,
        limit: Optional[int] = None,
    ) -> List[CatalogItem]:
        query: Dict[str, Any] = {"stock": {"$gt": 0}}
        excluded = list(exclude_ids or [])
        if excluded:
            query["card_id"] = {"$nin": excluded}
        return await self._find(query, limit=limit)

    async def get_many(self, card_ids: Iterable[int], in_stock_only: bool = True) -> List[CatalogItem]:
        ids = list(card_ids)
        if not ids:
            return []
        query: Dict[str, Any] = {"card_id": {"$in": ids}}
        if in_stock_only:
            query["stock"] = {"$gt": 0}
        return await self._find(query)
