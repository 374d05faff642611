"""
Demo catalog.

`python seed.py` wipes the product collection and inserts the demo set.
The API seeds an empty catalog on startup unless SEED_ON_STARTUP=0.
"""
from typing import List

import structlog

from database import Store
from schemas import Product

logger = structlog.get_logger(__name__)

DEMO_PRODUCTS: List[dict] = [
    {
        "name": "Tropical Paradise Hamper",
        "price": 400.00,
        "stock": 15,
        "image": "https://images.unsplash.com/photo-1519996529931-28324d5a630e?w=400",
        "description": "Banana, Pawpaw, Pineapple, Grapes, Apple",
    },
    {
        "name": "Berry Delight",
        "price": 800.00,
        "stock": 8,
        "image": "https://images.unsplash.com/photo-1464454709131-ffd692591ee5?w=400",
        "description": "Fresh mixed berries basket",
    },
    {
        "name": "Citrus Burst",
        "price": 100.00,
        "stock": 25,
        "image": "https://images.unsplash.com/photo-1582979512210-99b6a53386f9?w=400",
        "description": "Oranges, Lemons, Grapefruits",
    },
    {
        "name": "Exotic Mix",
        "price": 180.00,
        "stock": 12,
        "image": "https://images.unsplash.com/photo-1610832958506-aa56368176cf?w=400",
        "description": "Dragon fruit, Passion fruit, Kiwi",
    },
    {
        "name": "Classic Basket",
        "price": 90.00,
        "stock": 30,
        "image": "https://images.unsplash.com/photo-1542838132-92c53300491e?w=400",
        "description": "Traditional fruit selection",
    },
    {
        "name": "Premium Selection",
        "price": 250.00,
        "stock": 10,
        "image": "https://images.unsplash.com/photo-1619566636858-adf3ef46400b?w=400",
        "description": "Premium quality fruits",
    },
    {
        "name": "Family Pack",
        "price": 200.00,
        "stock": 18,
        "image": "https://images.unsplash.com/photo-1523049673857-eb18f1d7b578?w=400",
        "description": "Large family-sized basket",
    },
    {
        "name": "Gift Basket",
        "price": 130.00,
        "stock": 20,
        "image": "https://images.unsplash.com/photo-1519996409144-56c88426df6f?w=400",
        "description": "Perfect for gifting",
    },
]


def insert_demo_products(store: Store) -> List[Product]:
    return [store.put_product(Product(**prod)) for prod in DEMO_PRODUCTS]


def seed_if_empty(store: Store) -> int:
    if store.count_products() > 0:
        return 0
    inserted = insert_demo_products(store)
    logger.info("Catalog seeded", count=len(inserted))
    return len(inserted)


def reseed(store: Store) -> int:
    store.clear_products()
    inserted = insert_demo_products(store)
    logger.info("Catalog reseeded", count=len(inserted))
    return len(inserted)


if __name__ == "__main__":
    from database import get_store
    from logging_config import configure_logging

    configure_logging()
    count = reseed(get_store())
    print(f"{count} products added to database")
