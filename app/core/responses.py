"""
Response envelope shared by every Config endpoint.

    {"success": true, "message": "...", "data": ...}
"""
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Successful response wrapper."""
    success: bool = True
    message: str
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    """Failure wrapper produced by the exception handlers."""
    success: bool = False
    message: str
    errors: list[str] = []
