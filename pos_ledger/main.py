"""
POS Customer Ledger: FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI

from pos_ledger.config import get_settings
from pos_ledger.logging_config import configure_logging
from pos_ledger.api.health import router as health_router
from pos_ledger.api.customers import router as customers_router
from pos_ledger.api.events import router as events_router
from pos_ledger.api.ledger import router as ledger_router

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Customer balances and running-balance ledgers for a point of sale",
)

# Register routers
app.include_router(health_router)
app.include_router(customers_router)
app.include_router(events_router)
app.include_router(ledger_router)
