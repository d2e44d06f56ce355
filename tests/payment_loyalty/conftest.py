import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def payment_loyalty_bed():
    from payment_loyalty.domain import payment_loyalty

    bed = DomainFixture(payment_loyalty)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(payment_loyalty_bed):
    with payment_loyalty_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
