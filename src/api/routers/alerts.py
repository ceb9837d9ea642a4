"""Dashboard alert endpoints."""

from fastapi import APIRouter, Depends, Request

from src.api.middleware.rate_limit import READ_LIMIT, limiter
from src.api.routers.auth import CurrentUser, get_current_user
from src.engine.alerts import AlertCategory
from src.models.alerts import (
    AlertCountsResponse,
    AlertListResponse,
    AlertSummaryResponse,
    DelayedReceiptItem,
    ImpendingShortageItem,
    OverdueProcurementItem,
)

router = APIRouter(prefix="/api/alerts", tags=["alerts"])

_ITEM_MODELS = {
    AlertCategory.OVERDUE_PROCUREMENT: OverdueProcurementItem,
    AlertCategory.DELAYED_RECEIPT: DelayedReceiptItem,
    AlertCategory.IMPENDING_SHORTAGE: ImpendingShortageItem,
}


@router.get("/summary", response_model=AlertSummaryResponse)
@limiter.limit(READ_LIMIT)
async def get_alert_summary(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
):
    """Alert counts of every category plus the grand total."""
    handler = request.app.state.requirements_handler
    overview = await handler.alert_summary()
    counts = {
        category: AlertCountsResponse.model_validate(summary)
        for category, summary in overview.categories.items()
    }
    return AlertSummaryResponse(
        overdue_procurement=counts[AlertCategory.OVERDUE_PROCUREMENT],
        delayed_receipt=counts[AlertCategory.DELAYED_RECEIPT],
        impending_shortage=counts[AlertCategory.IMPENDING_SHORTAGE],
        total=AlertCountsResponse(
            total_count=overview.total_count,
            urgent_count=overview.urgent_count,
            warning_count=overview.warning_count,
        ),
    )


@router.get("/{category}", response_model=AlertListResponse)
@limiter.limit(READ_LIMIT)
async def list_alerts(
    request: Request,
    category: AlertCategory,
    current_user: CurrentUser = Depends(get_current_user),
):
    """Urgent and warning alerts of one category, most pressing first."""
    handler = request.app.state.requirements_handler
    bucket = await handler.list_alerts(category)
    item_model = _ITEM_MODELS[category]
    return AlertListResponse(
        category=category,
        urgent=[item_model.model_validate(alert) for alert in bucket.urgent],
        warning=[item_model.model_validate(alert) for alert in bucket.warning],
        summary=AlertCountsResponse.model_validate(bucket.summary),
    )
