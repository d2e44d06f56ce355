import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def product_catalog_bed():
    from product_catalog.domain import product_catalog

    bed = DomainFixture(product_catalog)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(product_catalog_bed):
    with product_catalog_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
