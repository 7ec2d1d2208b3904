"""Shared Pydantic schemas for the response envelope."""
from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Successful single-object response."""

    success: bool = True
    data: T


class ListResponse(BaseModel, Generic[T]):
    """Successful list response; ``length`` mirrors ``len(data)``."""

    success: bool = True
    data: list[T]
    length: int = Field(..., ge=0)

    @classmethod
    def of(cls, items: list[T]) -> ListResponse[T]:
        return cls(data=items, length=len(items))


class ErrorResponse(BaseModel):
    """Failure envelope; ``error`` is a message or a list of field messages."""

    success: bool = False
    error: str | list[str]
