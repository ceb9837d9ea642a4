"""API routers."""

from src.api.routers import alerts, auth, availability, bom, inventory, plans, receipts

__all__ = ["alerts", "auth", "availability", "bom", "inventory", "plans", "receipts"]
