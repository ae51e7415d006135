from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class StandardResponse(BaseModel, Generic[T]):
    """Envelope for JSON API bodies: ``{"data": ..., "message": ..., "success": ...}``."""

    data: Optional[T] = None
    message: Optional[str] = None
    success: bool = True
