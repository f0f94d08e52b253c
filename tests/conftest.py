import pytest

from store_providers import PROVIDER_IDS, PROVIDERS


@pytest.fixture(params=PROVIDERS, ids=PROVIDER_IDS)
def store_provider(request):
    return request.param()


@pytest.fixture
def store(store_provider, tmp_path):
    store = store_provider.create(tmp_path)
    yield store
    store_provider.cleanup(store)
