"""Pydantic models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field


class FoodCreate(BaseModel):
    """Payload for adding a food."""

    name: str | None = None
    category_id: int | None = None
    expiry_date: datetime | None = None


class FoodUpdate(BaseModel):
    """Payload for updating the remaining amount."""

    remaining_percentage: int = Field(ge=0, le=100)


class CategoryOut(BaseModel):
    """Category response."""

    id: int
    name: str


class FoodOut(BaseModel):
    """Food response with its category."""

    id: int | None
    name: str
    expiry_date: datetime
    remaining_percentage: int
    created_at: datetime
    category: CategoryOut


class CalendarEventOut(BaseModel):
    """Remote calendar event response."""

    id: str
    title: str
    start_time: datetime
    end_time: datetime
    is_all_day: bool
