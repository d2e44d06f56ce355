import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def order_management_bed():
    from order_management.domain import order_management

    bed = DomainFixture(order_management)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(order_management_bed):
    with order_management_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
