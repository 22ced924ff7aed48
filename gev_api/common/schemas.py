"""
This module defines common Pydantic models used across multiple API modules.
These models represent shared data structures to ensure consistency throughout the application.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, field_serializer

T = TypeVar('T')


class ORMModel(BaseModel):
    """
    Base for response models built straight from SQLAlchemy rows.
    """
    model_config = ConfigDict(from_attributes=True)


class TimestampMixin(BaseModel):
    """
    Adds creation and modification timestamps, serialized as ISO strings.
    """
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, value: Optional[datetime]) -> Optional[str]:
        """Serialize datetime to ISO format string."""
        return value.isoformat() if value else None


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope returned by every endpoint.

    Successful calls answer ``{"success": true, "data": ...}`` (plus an optional
    ``message`` and ``total``); failures answer ``{"success": false, "error": ...}``.
    """
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None
    error: Optional[str] = None
    total: Optional[int] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None,
           total: Optional[int] = None) -> 'ApiResponse':
        """Create a success response with data"""
        return cls(success=True, data=data, message=message, total=total)

    @classmethod
    def fail(cls, error: str) -> 'ApiResponse':
        """Create an error response carrying a client-facing message"""
        return cls(success=False, error=error)
