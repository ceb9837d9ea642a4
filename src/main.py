"""FastAPI application entrypoint for StockLens."""

import logging
import os
from contextlib import asynccontextmanager

from src.config import get_config
from src.logging_config import setup_logging

# Configure logging before anything else
_settings = get_config().settings
setup_logging(log_level=_settings.log_level, log_file=_settings.log_file)
logger = logging.getLogger(__name__)

from fastapi import FastAPI
from starlette.requests import Request

from src.api.errors import register_error_handlers
from src.api.middleware.rate_limit import setup_rate_limiting
from src.api.routers import alerts, auth, availability, bom, inventory, plans, receipts
from src.database.connection import Database
from src.query.requirements_handler import RequirementsHandler
from src.services.receipt_service import ReceiptService
from src.services.reservation_service import ReservationService
from src.services.stock_service import StockService


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    config.db_path.parent.mkdir(parents=True, exist_ok=True)

    db = Database(config.db_path)
    await db.connect()
    logger.info("Database ready at %s", config.db_path)

    stock_service = StockService(db)

    app.state.config = config
    app.state.db = db
    app.state.requirements_handler = RequirementsHandler(
        db,
        thresholds=config.engine.alerts,
        recent_transactions_limit=config.engine.recent_transactions_limit,
    )
    app.state.stock_service = stock_service
    app.state.receipt_service = ReceiptService(
        db, stock_service, order_numbers=config.engine.order_numbers
    )
    app.state.reservation_service = ReservationService(db, stock_service)

    yield

    await db.close()


app = FastAPI(title="StockLens", lifespan=lifespan)
setup_rate_limiting(app)
register_error_handlers(app)

cors_origins = os.getenv("CORS_ALLOWED_ORIGINS", "")
if cors_origins:
    from fastapi.middleware.cors import CORSMiddleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in cors_origins.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    response = await call_next(request)
    if request.url.path.startswith("/api/"):
        response.headers["X-API-Version"] = "1"
    return response


app.include_router(auth.router)
app.include_router(bom.router)
app.include_router(plans.router)
app.include_router(availability.router)
app.include_router(alerts.router)
app.include_router(receipts.router)
app.include_router(inventory.router)


@app.get("/health")
async def health():
    return {"status": "healthy"}
