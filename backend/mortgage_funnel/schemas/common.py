"""Common schemas used across the admin API."""

from pydantic import BaseModel


class Pagination(BaseModel):
    current: int
    total: int
    hasNext: bool
    hasPrev: bool
    totalRecords: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str
