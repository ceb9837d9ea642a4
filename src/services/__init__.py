"""Transactional mutation services."""

from src.services.ledger import append_entry, replay_stock
from src.services.order_numbers import OrderNumberGenerator, format_order_no
from src.services.receipt_service import ReceiptService
from src.services.reservation_service import ProductionResult, ReservationService
from src.services.stock_service import StockService

__all__ = [
    "OrderNumberGenerator",
    "ProductionResult",
    "ReceiptService",
    "ReservationService",
    "StockService",
    "append_entry",
    "format_order_no",
    "replay_stock",
]
