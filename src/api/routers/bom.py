"""BOM lookup endpoints."""

from fastapi import APIRouter, Depends, Path, Request

from src.api.middleware.rate_limit import READ_LIMIT, limiter
from src.api.routers.auth import CurrentUser, get_current_user
from src.models.requirements import BomLineResponse, BomResponse

router = APIRouter(prefix="/api/bom", tags=["bom"])

CODE_PATTERN = r"^[A-Za-z0-9\-_.]+$"


@router.get("/{product_code}", response_model=BomResponse)
@limiter.limit(READ_LIMIT)
async def get_bom(
    request: Request,
    product_code: str = Path(..., min_length=1, max_length=50, pattern=CODE_PATTERN),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Active BOM rows of a product, ordered by station then part code."""
    handler = request.app.state.requirements_handler
    lines = await handler.resolve_bom(product_code)
    return BomResponse(
        product_code=product_code,
        lines=[BomLineResponse.model_validate(line) for line in lines],
        total_lines=len(lines),
    )
