# cardreco/api/deps.py
from typing import Optional

from fastapi import Depends

from cardreco.core.config import Settings, get_settings
from cardreco.db.mongo import get_db
from cardreco.domain.repositories.card_repo import CardRepo
from cardreco.domain.repositories.customer_repo import CustomerRepo
from cardreco.domain.repositories.order_repo import OrderRepo
from cardreco.domain.services.context import RecoContext
from cardreco.domain.services.llm_client import OpenAICompleter, TextCompleter

_completer: Optional[OpenAICompleter] = None


# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    return db


def settings_dep() -> Settings:
    return get_settings()


# One OpenAI client per process; None when no key is configured
def completer_dep(settings: Settings = Depends(settings_dep)) -> Optional[TextCompleter]:
    global _completer
    if not settings.llm_enabled:
        return None
    if _completer is None:
        _completer = OpenAICompleter(settings)
    return _completer


def reco_context(
    db = Depends(mongo_db),
    settings: Settings = Depends(settings_dep),
    completer: Optional[TextCompleter] = Depends(completer_dep),
) -> RecoContext:
    return RecoContext(
        catalog=CardRepo(db),
        orders=OrderRepo(db),
        customers=CustomerRepo(db),
        settings=settings,
        completer=completer,
    )
