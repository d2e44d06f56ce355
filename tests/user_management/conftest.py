import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def user_management_bed():
    from user_management.domain import user_management

    bed = DomainFixture(user_management)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(user_management_bed):
    with user_management_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
