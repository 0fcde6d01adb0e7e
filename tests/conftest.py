import pytest

from cardreco.core.config import Settings
from cardreco.domain.services.context import RecoContext
from tests.fakes import FakeCatalog, FakeCustomers, FakeOrders


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, OPENAI_API_KEY="")


@pytest.fixture
def make_ctx(settings):
    def _make(cards=(), orders=(), customers=(), completer=None, **overrides) -> RecoContext:
        catalog = FakeCatalog(cards)
        s = settings.model_copy(update=overrides) if overrides else settings
        return RecoContext(
            catalog=catalog,
            orders=FakeOrders(catalog, orders),
            customers=FakeCustomers(customers),
            settings=s,
            completer=completer,
        )
    return _make
