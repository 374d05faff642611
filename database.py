"""
MongoDB connection and the storage interface used by the cart and checkout
logic.

`db` is None when DATABASE_URL is not set; routes then fail with an
Internal error instead of the app refusing to start.
"""
import os
from typing import Dict, List, Optional

import structlog
from bson import ObjectId
from pymongo import DESCENDING, MongoClient

from errors import Internal
from schemas import Cart, Order, Product
from utils import serialize_doc, utcnow

logger = structlog.get_logger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "ecommerce_cart")

client: Optional[MongoClient] = None
db = None

if DATABASE_URL:
    client = MongoClient(DATABASE_URL, tz_aware=True)
    db = client[DATABASE_NAME]


def canonical_id(product_id: str) -> str:
    """Lowercase hex form of an ObjectId string; other strings are returned as is."""
    if product_id and ObjectId.is_valid(product_id):
        return str(ObjectId(product_id))
    return product_id


class Store:
    """
    Persistence capabilities the core relies on.

    Every method is a single independent write or read; there is no
    multi-document transaction.
    """

    def list_products(self) -> List[Product]:
        raise NotImplementedError

    def get_product(self, product_id: str) -> Optional[Product]:
        raise NotImplementedError

    def put_product(self, product: Product) -> Product:
        raise NotImplementedError

    def count_products(self) -> int:
        raise NotImplementedError

    def delete_product(self, product_id: str) -> None:
        raise NotImplementedError

    def clear_products(self) -> None:
        raise NotImplementedError

    def adjust_stock(self, product_id: str, delta: int) -> bool:
        """
        Add `delta` to a product's stock. A decrement that would take stock
        below zero is not applied and returns False.
        """
        raise NotImplementedError

    def get_cart(self, owner_id: str) -> Optional[Cart]:
        raise NotImplementedError

    def put_cart(self, cart: Cart) -> Cart:
        raise NotImplementedError

    def put_order(self, order: Order) -> Order:
        raise NotImplementedError

    def list_orders(self, owner_id: str) -> List[Order]:
        raise NotImplementedError


class MongoStore(Store):
    def __init__(self, database):
        self.db = database

    def list_products(self) -> List[Product]:
        return [Product(**serialize_doc(d)) for d in self.db["product"].find({})]

    def get_product(self, product_id: str) -> Optional[Product]:
        if not ObjectId.is_valid(product_id):
            return None
        doc = self.db["product"].find_one({"_id": ObjectId(product_id)})
        return Product(**serialize_doc(doc)) if doc else None

    def put_product(self, product: Product) -> Product:
        now = utcnow()
        doc = product.model_dump(exclude={"id"})
        doc["created_at"] = doc.get("created_at") or now
        doc["updated_at"] = now
        if product.id:
            oid = ObjectId(product.id)
            self.db["product"].replace_one({"_id": oid}, doc, upsert=True)
        else:
            oid = self.db["product"].insert_one(doc).inserted_id
        return Product(**serialize_doc({**doc, "_id": oid}))

    def count_products(self) -> int:
        return self.db["product"].count_documents({})

    def delete_product(self, product_id: str) -> None:
        if ObjectId.is_valid(product_id):
            self.db["product"].delete_one({"_id": ObjectId(product_id)})

    def clear_products(self) -> None:
        self.db["product"].delete_many({})

    def adjust_stock(self, product_id: str, delta: int) -> bool:
        query = {"_id": ObjectId(product_id)}
        if delta < 0:
            query["stock"] = {"$gte": -delta}
        result = self.db["product"].update_one(
            query,
            {"$inc": {"stock": delta}, "$set": {"updated_at": utcnow()}},
        )
        if result.matched_count == 0:
            logger.warning("Stock adjustment not applied", product_id=product_id, delta=delta)
            return False
        return True

    def get_cart(self, owner_id: str) -> Optional[Cart]:
        doc = self.db["cart"].find_one({"userId": owner_id})
        if not doc:
            return None
        doc.pop("_id", None)
        return Cart(**doc)

    def put_cart(self, cart: Cart) -> Cart:
        now = utcnow()
        items = [line.model_dump(by_alias=True) for line in cart.items]
        self.db["cart"].update_one(
            {"userId": cart.user_id},
            {"$set": {"items": items, "updated_at": now}, "$setOnInsert": {"created_at": now}},
            upsert=True,
        )
        return cart.model_copy(update={"updated_at": now, "created_at": cart.created_at or now})

    def put_order(self, order: Order) -> Order:
        order = order.model_copy(update={"created_at": order.created_at or utcnow()})
        doc = order.model_dump(by_alias=True, exclude={"id"})
        inserted_id = self.db["order"].insert_one(doc).inserted_id
        return order.model_copy(update={"id": str(inserted_id)})

    def list_orders(self, owner_id: str) -> List[Order]:
        cursor = self.db["order"].find({"userId": owner_id}).sort("createdAt", DESCENDING)
        return [Order(**serialize_doc(d)) for d in cursor]


class MemoryStore(Store):
    """In-process store with the same behaviour as MongoStore, for tests and demos."""

    def __init__(self):
        self.products: Dict[str, Product] = {}
        self.carts: Dict[str, Cart] = {}
        self.orders: List[Order] = []

    def list_products(self) -> List[Product]:
        return [p.model_copy() for p in self.products.values()]

    def get_product(self, product_id: str) -> Optional[Product]:
        product = self.products.get(canonical_id(product_id))
        return product.model_copy() if product else None

    def put_product(self, product: Product) -> Product:
        now = utcnow()
        product = product.model_copy(update={
            "id": product.id or str(ObjectId()),
            "created_at": product.created_at or now,
            "updated_at": now,
        })
        self.products[product.id] = product
        return product.model_copy()

    def delete_product(self, product_id: str) -> None:
        self.products.pop(canonical_id(product_id), None)

    def count_products(self) -> int:
        return len(self.products)

    def clear_products(self) -> None:
        self.products.clear()

    def adjust_stock(self, product_id: str, delta: int) -> bool:
        product = self.products.get(canonical_id(product_id))
        if product is None or product.stock + delta < 0:
            logger.warning("Stock adjustment not applied", product_id=product_id, delta=delta)
            return False
        self.products[product.id] = product.model_copy(
            update={"stock": product.stock + delta, "updated_at": utcnow()}
        )
        return True

    def get_cart(self, owner_id: str) -> Optional[Cart]:
        cart = self.carts.get(owner_id)
        return cart.model_copy(deep=True) if cart else None

    def put_cart(self, cart: Cart) -> Cart:
        now = utcnow()
        cart = cart.model_copy(deep=True, update={"updated_at": now, "created_at": cart.created_at or now})
        self.carts[cart.user_id] = cart
        return cart.model_copy(deep=True)

    def put_order(self, order: Order) -> Order:
        order = order.model_copy(deep=True, update={
            "id": order.id or str(ObjectId()),
            "created_at": order.created_at or utcnow(),
        })
        self.orders.append(order)
        return order.model_copy(deep=True)

    def list_orders(self, owner_id: str) -> List[Order]:
        owned = [o.model_copy(deep=True) for o in self.orders if o.user_id == owner_id]
        return sorted(owned, key=lambda o: o.created_at, reverse=True)


def get_store() -> Store:
    """FastAPI dependency returning the configured store."""
    if db is None:
        raise Internal("Database not available")
    return MongoStore(db)
