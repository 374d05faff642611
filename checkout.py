"""
Checkout: turn an owner's cart into an order.

The flow is load -> validate & price -> totals -> write order -> deduct
stock -> clear cart. Any failure before the order write leaves cart, stock
and orders untouched. The three writes after validation are separate store
calls with no wrapping transaction: the order is written first, so a crash
part-way leaves an order whose stock or cart cleanup is missing rather than
deducted stock with no order. Two concurrent checkouts for the same product
can both pass validation (oversell).

Money is computed with Decimal and rounded to cents only when the order is
built.
"""
import os
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

import structlog

from database import Store
from errors import EmptyCart, InsufficientStock, ProductGone
from schemas import Order, OrderLine, PaymentStatus
from utils import now_millis

logger = structlog.get_logger(__name__)

TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.10"))
CENTS = Decimal("0.01")


def to_decimal(value) -> Decimal:
    # str() first so 0.1 becomes Decimal("0.1"), not its binary expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_totals(subtotal: Decimal, tax_rate: Decimal = TAX_RATE) -> Tuple[Decimal, Decimal, Decimal]:
    """Return (subtotal, tax, total) rounded to cents, with total == subtotal + tax."""
    tax = quantize(subtotal * tax_rate)
    subtotal = quantize(subtotal)
    return subtotal, tax, subtotal + tax


def price_lines(store: Store, cart) -> Tuple[List[OrderLine], Decimal]:
    """Snapshot each cart line and sum price * quantity, in cart order."""
    lines: List[OrderLine] = []
    subtotal = Decimal("0")
    for line in cart.items:
        product = store.get_product(line.product_id)
        if product is None:
            raise ProductGone("One or more products no longer exist")
        if product.stock < line.quantity:
            raise InsufficientStock(
                f"Insufficient stock for {product.name}. Only {product.stock} available."
            )
        subtotal += to_decimal(product.price) * line.quantity
        lines.append(OrderLine(
            product_id=product.id,
            name=product.name,
            price=product.price,
            quantity=line.quantity,
        ))
    return lines, subtotal


def checkout(store: Store, owner_id: str, payment_id: Optional[str] = None, tax_rate: Decimal = TAX_RATE) -> Order:
    cart = store.get_cart(owner_id)
    if cart is None or not cart.items:
        logger.info("Checkout rejected", owner_id=owner_id, reason="empty_cart")
        raise EmptyCart("Cart is empty")

    try:
        lines, subtotal = price_lines(store, cart)
    except (ProductGone, InsufficientStock) as exc:
        logger.info("Checkout rejected", owner_id=owner_id, reason=type(exc).__name__, error=exc.message)
        raise

    subtotal, tax, total = compute_totals(subtotal, tax_rate)

    order = store.put_order(Order(
        user_id=owner_id,
        items=lines,
        subtotal=float(subtotal),
        tax=float(tax),
        total=float(total),
        payment_status=PaymentStatus.COMPLETED,
        payment_id=payment_id or f"pay_{now_millis()}",
    ))
    logger.info("Order placed", owner_id=owner_id, order_id=order.id, total=str(total))

    for line in lines:
        if store.adjust_stock(line.product_id, -line.quantity):
            logger.debug("Stock deducted", product_id=line.product_id, quantity=line.quantity)

    cart.items = []
    store.put_cart(cart)
    return order


def list_orders(store: Store, owner_id: str) -> List[Order]:
    """Order history, newest first."""
    return store.list_orders(owner_id)
