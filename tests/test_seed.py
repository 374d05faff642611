from database import MemoryStore
from schemas import Product
from seed import DEMO_PRODUCTS, reseed, seed_if_empty


def test_seed_if_empty_inserts_demo_catalog():
    store = MemoryStore()

    assert seed_if_empty(store) == len(DEMO_PRODUCTS)

    names = {p.name for p in store.list_products()}
    assert "Tropical Paradise Hamper" in names
    assert all(p.id for p in store.list_products())


def test_seed_if_empty_leaves_existing_catalog():
    store = MemoryStore()
    store.put_product(Product(name="Only One", price=1.0, stock=1, image="https://img/one.jpg"))

    assert seed_if_empty(store) == 0
    assert store.count_products() == 1


def test_reseed_replaces_catalog():
    store = MemoryStore()
    store.put_product(Product(name="Stale", price=1.0, stock=1, image="https://img/stale.jpg"))

    reseed(store)

    assert store.count_products() == len(DEMO_PRODUCTS)
    assert "Stale" not in {p.name for p in store.list_products()}
