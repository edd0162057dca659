import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bookstore.config import settings
from bookstore.database import create_db_and_tables
from bookstore.errors import register_error_handlers
from bookstore.routes import cart, checkout, health, orders, promotions

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Bookstore Checkout API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(orders.admin_router, prefix="/admin/orders", tags=["Admin Orders"])
app.include_router(promotions.router, prefix="/admin/promotions", tags=["Admin Promotions"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "cart": ["/cart", "/cart/add"],
        "checkout": ["/checkout"],
        "orders": ["/orders", "/orders/{order_id}"],
        "admin": [
            "/admin/orders",
            "/admin/promotions", "/admin/promotions/{promotion_id}",
            "/admin/promotions/{promotion_id}/send",
        ],
        "health": ["/health/check"],
    }
