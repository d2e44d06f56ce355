import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def engagement_bed():
    from engagement.domain import engagement

    bed = DomainFixture(engagement)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(engagement_bed):
    with engagement_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
