import os
import time

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import cart as cart_service
import checkout as checkout_service
import database
from auth import Identity, create_token, get_identity, new_guest_id
from database import Store, get_store
from errors import NotFound, ShopError
from logging_config import add_context, clear_context, configure_logging
from payment import PaymentSimulator, get_payment_simulator
from schemas import AddToCartRequest, CartView, CheckoutRequest, Order, PaymentRequest
from seed import seed_if_empty
from utils import utcnow

configure_logging()
logger = structlog.get_logger(__name__)

# App init
app = FastAPI(title="Shopping Cart API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    clear_context()
    add_context(method=request.method, path=request.url.path)
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "Request handled",
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return response


# Error mapping
def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(ShopError)
def handle_shop_error(request: Request, exc: ShopError):
    if exc.status_code >= 500:
        logger.error("Request failed", error=exc.message)
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid request body")


@app.exception_handler(PyMongoError)
def handle_store_error(request: Request, exc: PyMongoError):
    logger.exception("Store unavailable")
    return error_response(500, "Database error")


@app.exception_handler(StarletteHTTPException)
def handle_http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response(404, "Route not found")
    return error_response(exc.status_code, str(exc.detail))


def get_owner(identity: Identity = Depends(get_identity)) -> str:
    return identity.user_id


def cart_body(view: CartView) -> dict:
    return {
        "userId": view.user_id,
        "items": [item.model_dump(mode="json", by_alias=True) for item in view.items],
    }


def order_body(order: Order) -> dict:
    data = order.model_dump(mode="json", by_alias=True)
    return {
        "orderId": data["id"],
        "items": data["items"],
        "subtotal": data["subtotal"],
        "tax": data["tax"],
        "total": data["total"],
        "createdAt": data["createdAt"],
    }


# Routes
@app.get("/")
def root():
    return {"message": "Shopping Cart API running"}


@app.get("/api/health")
def health():
    response = {
        "status": "OK",
        "message": "Server is running",
        "timestamp": utcnow().isoformat(),
        "database": "Not Configured",
    }
    if database.db is not None:
        try:
            database.db.command("ping")
            response["database"] = "Connected"
        except PyMongoError as e:
            response["database"] = f"Error: {str(e)[:50]}"
    return response


# Auth
@app.post("/api/auth/guest")
def issue_guest_token():
    guest_id = new_guest_id()
    return {"token": create_token(guest_id, is_guest=True), "userId": guest_id, "isGuest": True}


# Products
@app.get("/api/products")
def list_products(store: Store = Depends(get_store)):
    products = store.list_products()
    return {"products": [p.model_dump(mode="json") for p in products]}


@app.get("/api/products/{product_id}")
def get_product(product_id: str, store: Store = Depends(get_store)):
    product = store.get_product(product_id)
    if product is None:
        raise NotFound("Product not found")
    return {"product": product.model_dump(mode="json")}


# Cart
@app.get("/api/cart")
def get_cart(owner_id: str = Depends(get_owner), store: Store = Depends(get_store)):
    view = cart_service.get_cart(store, owner_id)
    return {"items": cart_body(view)["items"], "cartCount": view.cart_count}


@app.post("/api/cart")
def add_to_cart(req: AddToCartRequest, owner_id: str = Depends(get_owner), store: Store = Depends(get_store)):
    view = cart_service.add_line(store, owner_id, req.product_id, req.quantity)
    return {"message": "Item added to cart successfully", "cart": cart_body(view), "cartCount": view.cart_count}


@app.delete("/api/cart/{product_id}")
def remove_from_cart(product_id: str, owner_id: str = Depends(get_owner), store: Store = Depends(get_store)):
    view = cart_service.remove_line(store, owner_id, product_id)
    return {"message": "Item removed from cart", "cart": cart_body(view), "cartCount": view.cart_count}


# Payment / Checkout / Orders
@app.post("/api/payment")
def process_payment(
    req: PaymentRequest,
    owner_id: str = Depends(get_owner),
    simulator: PaymentSimulator = Depends(get_payment_simulator),
):
    result = simulator.process(req.amount)
    return result.model_dump(by_alias=True)


@app.post("/api/checkout")
def place_order(req: CheckoutRequest, owner_id: str = Depends(get_owner), store: Store = Depends(get_store)):
    order = checkout_service.checkout(store, owner_id, req.payment_id)
    return {"success": True, "message": "Order placed successfully", "order": order_body(order)}


@app.get("/api/orders")
def list_orders(owner_id: str = Depends(get_owner), store: Store = Depends(get_store)):
    orders = checkout_service.list_orders(store, owner_id)
    return {"orders": [o.model_dump(mode="json", by_alias=True) for o in orders]}


# Seed demo products on startup
@app.on_event("startup")
def seed_products_if_empty():
    if os.getenv("SEED_ON_STARTUP", "1").lower() in ("0", "false", "no"):
        return
    if database.db is None:
        logger.warning("DATABASE_URL not set; skipping catalog seed")
        return
    try:
        seed_if_empty(database.MongoStore(database.db))
    except PyMongoError:
        logger.exception("Catalog seed failed")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
