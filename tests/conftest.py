import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def storefront_bed(request):
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture()
def make_product():
    """Register a product through the catalogue and return its id."""
    from protean import current_domain
    from storefront.catalogue.management import RegisterProduct

    def _make(name="Widget", price=10.0, stock=10):
        return current_domain.process(
            RegisterProduct(name=name, price=price, stock=stock),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def shipping_address():
    return {
        "name": "Jane Doe",
        "phone": "+15550100",
        "street": "1 Market Street",
        "city": "Springfield",
        "state": "IL",
        "country": "US",
        "zip_code": "62701",
    }
