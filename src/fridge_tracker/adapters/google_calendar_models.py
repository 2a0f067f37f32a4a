"""Pydantic models for Google Calendar API payloads."""

from pydantic import BaseModel, ConfigDict, Field


class GoogleEventDateTime(BaseModel):
    """Start or end of an event; ``date`` is set for all-day events."""

    model_config = ConfigDict(populate_by_name=True)

    date: str | None = None
    date_time: str | None = Field(default=None, alias="dateTime")
    time_zone: str | None = Field(default=None, alias="timeZone")


class GoogleEvent(BaseModel):
    """Event resource."""

    id: str | None = None
    summary: str | None = None
    description: str | None = None
    start: GoogleEventDateTime | None = None
    end: GoogleEventDateTime | None = None


class GoogleCalendarListEntry(BaseModel):
    """Calendar list entry resource."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    summary: str | None = None
    primary: bool = False
    color_id: str | None = Field(default=None, alias="colorId")
