"""
Cart reconciliation.

A cart holds at most one line per product, and a line's quantity never
exceeds the product's stock at the time the line was written. Stock can
change afterwards; checkout re-validates it.

There is no locking: two concurrent adds for the same owner race on the
cart document and the last write wins.
"""
from typing import List, Optional

import structlog
from bson import ObjectId

from database import Store, canonical_id
from errors import InsufficientStock, InvalidArgument, NotFound
from schemas import Cart, CartItem, CartLine, CartView

logger = structlog.get_logger(__name__)


def cart_count(lines) -> int:
    return sum(line.quantity for line in lines)


def resolve_lines(store: Store, cart: Cart) -> List[CartItem]:
    # Lines whose product was deleted are hidden, not removed from storage.
    items = []
    for line in cart.items:
        product = store.get_product(line.product_id)
        if product is None:
            continue
        items.append(CartItem(product_id=line.product_id, quantity=line.quantity, product=product))
    return items


def _view(store: Store, owner_id: str, cart: Optional[Cart]) -> CartView:
    if cart is None:
        return CartView(user_id=owner_id)
    items = resolve_lines(store, cart)
    return CartView(user_id=owner_id, items=items, cart_count=cart_count(items))


def get_cart(store: Store, owner_id: str) -> CartView:
    return _view(store, owner_id, store.get_cart(owner_id))


def add_line(store: Store, owner_id: str, product_id: Optional[str], quantity: Optional[int]) -> CartView:
    """
    Add `quantity` units of a product, merging into an existing line.

    Raises InvalidArgument for a missing/malformed product id or a quantity
    below 1, NotFound for an unknown product and InsufficientStock when the
    resulting line would exceed the product's stock.
    """
    if not product_id or quantity is None or quantity < 1:
        raise InvalidArgument("Invalid productId or quantity")
    if not ObjectId.is_valid(product_id):
        raise InvalidArgument("Invalid ID format")

    product = store.get_product(product_id)
    if product is None:
        raise NotFound("Product not found")
    product_id = product.id

    if product.stock < quantity:
        raise InsufficientStock("Insufficient stock available")

    cart = store.get_cart(owner_id) or Cart(user_id=owner_id)
    line = cart.find_line(product_id)
    if line is None:
        cart.items.append(CartLine(product_id=product_id, quantity=quantity))
        logger.info("Cart line added", owner_id=owner_id, product_id=product_id, quantity=quantity)
    else:
        merged = line.quantity + quantity
        if product.stock < merged:
            raise InsufficientStock("Insufficient stock for requested quantity")
        line.quantity = merged
        logger.info("Cart line merged", owner_id=owner_id, product_id=product_id, quantity=merged)

    return _view(store, owner_id, store.put_cart(cart))


def remove_line(store: Store, owner_id: str, product_id: str) -> CartView:
    product_id = canonical_id(product_id)
    cart = store.get_cart(owner_id)
    if cart is None:
        raise NotFound("Cart not found")

    remaining = [line for line in cart.items if line.product_id != product_id]
    if len(remaining) == len(cart.items):
        raise NotFound("Item not found in cart")

    cart.items = remaining
    logger.info("Cart line removed", owner_id=owner_id, product_id=product_id)
    return _view(store, owner_id, store.put_cart(cart))
