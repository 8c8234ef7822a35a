# marketplace/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from marketplace.data.database import init_db
from marketplace.api.routers import health, users, vendors, products, carts, checkout, orders
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database...")
    init_db()
    logger.info("Database ready")
    yield


def create_app(init_database: bool = True) -> FastAPI:
    app = FastAPI(
        title="Marketplace Service",
        version="1.0.0",
        lifespan=lifespan if init_database else None,
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(vendors.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
