"""Error response models for API."""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every error response: a message plus a machine-readable kind."""

    detail: str
    error_code: Optional[str] = None
