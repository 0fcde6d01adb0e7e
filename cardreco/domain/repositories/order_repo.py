# cardreco/domain/repositories/order_repo.py

from __future__ import annotations
from typing import Any, Dict, List, Optional
import json
import logging
import time

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from cardreco.domain.errors import CollaboratorUnavailable
from cardreco.domain.models.card import CustomerPurchases, PurchaseLine, PurchaseRecord
from cardreco.domain.repositories.card_repo import card_from_doc

logger = logging.getLogger(__name__)


def _json_preview(obj: Any, limit: int = 1000) -> str:
    """Minify and truncate JSON for debug logs."""
    try:
        s = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, default=str)
        return s if len(s) <= limit else s[:limit] + "…[truncated]"
    except Exception:
        return "<unserializable>"


_CARD_LOOKUP = {
    "$lookup": {
        "from": "cards",
        "localField": "items.card_id",
        "foreignField": "card_id",
        "as": "cards",
    }
}


class OrderRepo:
    """
    Order-history collaborator backed by the 'orders' collection:
      { order_id, customer_id, created_at, items: [{card_id, quantity, unit_price}] }
    Item details are joined from 'cards' with $lookup.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "orders"):
        self.col = db[collection_name]

    async def _aggregate(self, operation: str, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        logger.debug("orders %s pipeline=%s", operation, _json_preview(pipeline, limit=2000))
        t0 = time.perf_counter()
        try:
            docs = await self.col.aggregate(pipeline).to_list(length=None)
        except PyMongoError as e:
            raise CollaboratorUnavailable("order_history", operation, e) from e
        logger.debug("orders %s db_ok docs=%s db_time=%.3fs", operation, len(docs), time.perf_counter() - t0)
        return docs

    @staticmethod
    def _record_from_doc(doc: Dict[str, Any]) -> Optional[PurchaseRecord]:
        cards = {c.card_id: c for c in (card_from_doc(d) for d in doc.get("cards") or []) if c}
        try:
            lines = [
                PurchaseLine(
                    card_id=it["card_id"],
                    quantity=it.get("quantity", 1),
                    unit_price=it.get("unit_price", 0.0),
                    card=cards.get(it["card_id"]),
                )
                for it in doc.get("items") or []
            ]
            return PurchaseRecord(
                order_id=str(doc.get("order_id")),
                customer_id=str(doc.get("customer_id")),
                created_at=doc.get("created_at"),
                lines=lines,
            )
        except (KeyError, ValidationError) as e:
            logger.warning("order decode error order_id=%s err=%s", doc.get("order_id"), e)
            return None

    async def list_for_customer(self, customer_id: str, limit: Optional[int] = None) -> List[PurchaseRecord]:
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"customer_id": customer_id}},
            {"$sort": {"created_at": -1}},
        ]
        if limit:
            pipeline.append({"$limit": limit})
        pipeline += [_CARD_LOOKUP, {"$project": {"_id": 0, "cards._id": 0}}]

        docs = await self._aggregate("list_for_customer", pipeline)
        return [r for r in (self._record_from_doc(d) for d in docs) if r is not None]

    async def list_all_lines(self) -> List[PurchaseLine]:
        pipeline: List[Dict[str, Any]] = [
            {"$unwind": "$items"},
            {"$lookup": {
                "from": "cards",
                "localField": "items.card_id",
                "foreignField": "card_id",
                "as": "card",
            }},
            {"$unwind": {"path": "$card", "preserveNullAndEmptyArrays": True}},
            {"$project": {
                "_id": 0,
                "card_id": "$items.card_id",
                "quantity": {"$ifNull": ["$items.quantity", 1]},
                "unit_price": {"$ifNull": ["$items.unit_price", 0]},
                "card": 1,
            }},
        ]
        docs = await self._aggregate("list_all_lines", pipeline)

        lines: List[PurchaseLine] = []
        for d in docs:
            card = card_from_doc(d["card"]) if d.get("card") else None
            try:
                lines.append(PurchaseLine(
                    card_id=d["card_id"],
                    quantity=d["quantity"],
                    unit_price=d["unit_price"],
                    card=card,
                ))
            except (KeyError, ValidationError) as e:
                logger.warning("order line decode error card_id=%s err=%s", d.get("card_id"), e)
        return lines

    async def list_customer_purchases(self, exclude_customer_id: Optional[str] = None) -> List[CustomerPurchases]:
        pipeline: List[Dict[str, Any]] = []
        if exclude_customer_id is not None:
            pipeline.append({"$match": {"customer_id": {"$ne": exclude_customer_id}}})
        pipeline += [
            {"$unwind": "$items"},
            {"$group": {"_id": "$customer_id", "card_ids": {"$addToSet": "$items.card_id"}}},
            {"$sort": {"_id": 1}},
            {"$project": {"_id": 0, "customer_id": "$_id", "card_ids": 1}},
        ]
        docs = await self._aggregate("list_customer_purchases", pipeline)

        rows: List[CustomerPurchases] = []
        for d in docs:
            try:
                rows.append(CustomerPurchases(customer_id=str(d["customer_id"]), card_ids=frozenset(d["card_ids"])))
            except (KeyError, TypeError, ValidationError) as e:
                # one broken customer must not abort collaborative filtering
                logger.warning("customer purchases decode error customer_id=%s err=%s", d.get("customer_id"), e)
        return rows
