# cardreco/domain/repositories/customer_repo.py

from __future__ import annotations
from typing import Optional
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from cardreco.domain.errors import CollaboratorUnavailable
from cardreco.domain.models.card import Customer

logger = logging.getLogger(__name__)


class CustomerRepo:
    """Customer lookups backed by the 'customers' collection: { customer_id, name, email }."""

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "customers"):
        self.col = db[collection_name]

    async def get_by_customer_id(self, customer_id: str) -> Optional[Customer]:
        try:
            doc = await self.col.find_one(
                {"customer_id": customer_id},
                {"_id": 0, "customer_id": 1, "name": 1, "email": 1},
            )
        except PyMongoError as e:
            raise CollaboratorUnavailable("customers", "get_by_customer_id", e) from e
        if not doc:
            return None
        try:
            return Customer.model_validate(doc)
        except ValidationError as e:
            logger.warning("customer decode error customer_id=%s err=%s", customer_id, e)
            return None
