import os
import random

import mongomock
import pytest

os.environ["ENVIRONMENT"] = "test"
os.environ["SEED_ON_STARTUP"] = "0"
os.environ.pop("DATABASE_URL", None)

from fastapi.testclient import TestClient  # noqa: E402

from auth import create_token  # noqa: E402
from database import MemoryStore, MongoStore, get_store  # noqa: E402
from main import app  # noqa: E402
from payment import PaymentSimulator, get_payment_simulator  # noqa: E402
from schemas import Product  # noqa: E402


@pytest.fixture(params=["memory", "mongo"])
def store(request):
    """Every test using the store runs against both implementations."""
    if request.param == "mongo":
        return MongoStore(mongomock.MongoClient(tz_aware=True)["shop_test"])
    return MemoryStore()


@pytest.fixture()
def catalog(store):
    """Three products keyed by a short name."""
    return {
        "hamper": store.put_product(Product(
            name="Tropical Paradise Hamper", price=400.00, stock=15, image="https://img/hamper.jpg",
        )),
        "citrus": store.put_product(Product(
            name="Citrus Burst", price=100.00, stock=25, image="https://img/citrus.jpg",
        )),
        "berry": store.put_product(Product(
            name="Berry Delight", price=800.00, stock=2, image="https://img/berry.jpg",
        )),
    }


@pytest.fixture()
def simulator():
    return PaymentSimulator(success_rate=1.0, delay=0, rng=random.Random(7))


@pytest.fixture()
def client(store, simulator):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_payment_simulator] = lambda: simulator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    return {"Authorization": f"Bearer {create_token('user-001')}"}
