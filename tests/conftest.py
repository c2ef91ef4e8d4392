import sys
from decimal import Decimal
from pathlib import Path

import pytest
from freezegun import freeze_time

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from grocery_pricing.engine.canonical.models import Bundle, Product  # noqa: E402
from grocery_pricing.persistence.memory import (  # noqa: E402
    InMemoryBundles,
    InMemoryProducts,
    InMemoryRangeSettings,
)

DEFAULT_ENV = {
    "AWS_ACCESS_KEY_ID": "test-access-key",
    "AWS_SECRET_ACCESS_KEY": "test-secret-key",
    "AWS_SESSION_TOKEN": "test-session",
    "AWS_DEFAULT_REGION": "us-east-1",
    "CLOUDWATCH_METRICS_ENABLED": "false",
}


@pytest.fixture(scope="session")
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def tests_data_dir(project_root: Path) -> Path:
    return project_root / "data" / "grocery_pricing"


@pytest.fixture(autouse=True)
def _test_env(monkeypatch):
    for key, value in DEFAULT_ENV.items():
        monkeypatch.setenv(key, value)
    for key in ("PRODUCTS_TABLE", "BUNDLES_TABLE", "RANGE_SETTINGS_TABLE", "PRICING_CONFIG_PATH"):
        monkeypatch.delenv(key, raising=False)
    yield


def make_product(product_id: str, original: str, current: str | None = None) -> Product:
    return Product(
        id=product_id,
        original_price=Decimal(original),
        current_price=Decimal(current if current is not None else original),
    )


@pytest.fixture
def products() -> InMemoryProducts:
    return InMemoryProducts(
        [
            make_product("A", "5", "5"),
            make_product("B", "50", "55"),
            make_product("C", "10", "12"),
            make_product("D", "120", "150"),
        ]
    )


@pytest.fixture
def bundles() -> InMemoryBundles:
    return InMemoryBundles(
        [
            Bundle(id="bundle-1", product_ids=["A", "B"]),
            Bundle(id="bundle-2", product_ids=["C", "C", "D"]),
        ]
    )


@pytest.fixture
def range_settings() -> InMemoryRangeSettings:
    return InMemoryRangeSettings()


@pytest.fixture
def freezer():
    with freeze_time("2020-01-01T00:00:00Z") as frozen_datetime:
        yield frozen_datetime
