import datetime

import pytest

from skyward.sky.types import ObserverContext


def pytest_addoption(parser):
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run tests that reach the external timing services",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--integration"):
        return

    for item in items:
        if "integration" in item.keywords:
            item.add_marker(
                pytest.mark.skip(
                    reason="need --integration option to run integration tests"
                )
            )


@pytest.fixture
def new_york():
    # Offset derived from longitude: round(-74 / 15) == -5.
    return ObserverContext(latitude_deg=40.7, longitude_deg=-74.0)


@pytest.fixture
def utc_minus_5():
    return datetime.timezone(datetime.timedelta(hours=-5))
