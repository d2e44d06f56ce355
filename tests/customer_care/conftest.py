import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def customer_care_bed():
    from customer_care.domain import customer_care

    bed = DomainFixture(customer_care)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(customer_care_bed):
    with customer_care_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
