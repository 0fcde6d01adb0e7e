from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from cardreco.core.config import Settings
from cardreco.domain.repositories.base import CatalogReader, CustomerReader, OrderHistoryReader
from cardreco.domain.services.llm_client import TextCompleter


@dataclass(frozen=True)
class RecoContext:
    """
    Collaborators and tuning for one request.
    Built per request by the API layer (see api/deps.py); holds no state of its own.
    """
    catalog: CatalogReader
    orders: OrderHistoryReader
    customers: CustomerReader
    settings: Settings
    completer: Optional[TextCompleter] = None
