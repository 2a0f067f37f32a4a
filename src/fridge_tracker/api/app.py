"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status

from fridge_tracker.api.models import (
    CalendarEventOut,
    CategoryOut,
    FoodCreate,
    FoodOut,
    FoodUpdate,
)
from fridge_tracker.app_logging import configure_logging
from fridge_tracker.containers import AppContainer
from fridge_tracker.domain.calendar import CalendarEvent
from fridge_tracker.domain.errors import InventoryValidationError, SyncFailure
from fridge_tracker.domain.inventory import Category, Food, FoodWithCategory
from fridge_tracker.services.food_filter import filter_foods


def _get_container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_token(
    request: Request, x_api_token: str | None = Header(default=None)
) -> None:
    """Ensure requests include the configured API token."""
    container = _get_container(request)
    if not x_api_token or x_api_token != container.settings.api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container.inventory_service.load()
        sync = app.state.container.calendar_sync_service
        if sync.is_connected():
            year, month = sync.displayed_month
            await sync.fetch_event_dates(year, month)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    protected = [Depends(require_token)]

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/categories", dependencies=protected)
    async def list_categories(request: Request) -> dict[str, object]:
        """Return all categories ordered by name."""
        categories = _get_container(request).inventory_service.categories().value
        return {"categories": [_category_out(item) for item in categories]}

    @app.get("/foods", dependencies=protected)
    async def list_foods(
        request: Request, q: str = "", category_id: int | None = None
    ) -> dict[str, object]:
        """Return foods filtered by name and category, soonest expiry first."""
        foods = _get_container(request).inventory_service.foods_with_category().value
        return {"foods": [_food_out(item) for item in filter_foods(foods, q, category_id)]}

    @app.post("/foods", dependencies=protected, status_code=status.HTTP_201_CREATED)
    async def add_food(payload: FoodCreate, request: Request) -> dict[str, object]:
        """Add a food and mirror its expiry date to the calendar if connected."""
        pantry = _get_container(request).pantry_service
        try:
            outcome = await pantry.add_food(
                payload.name, payload.category_id, payload.expiry_date
            )
        except InventoryValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        if outcome is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail="Add already in progress"
            )
        return {
            "food_id": outcome.food.id,
            "calendar_event_id": outcome.calendar_event_id,
            "calendar_warning": outcome.calendar_warning,
        }

    @app.patch("/foods/{food_id}", dependencies=protected)
    async def update_food(
        food_id: int, payload: FoodUpdate, request: Request
    ) -> dict[str, object]:
        """Update the remaining percentage of a food."""
        pantry = _get_container(request).pantry_service
        updated = pantry.update_remaining(food_id, payload.remaining_percentage)
        if updated is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"food_id": updated.id, "remaining_percentage": updated.remaining_percentage}

    @app.delete("/foods/{food_id}", dependencies=protected)
    async def delete_food(food_id: int, request: Request) -> dict[str, str]:
        """Delete a food locally."""
        if not _get_container(request).pantry_service.delete_food(food_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"status": "deleted"}

    @app.get("/calendar/days/{day}", dependencies=protected)
    async def calendar_day(day: date, request: Request) -> dict[str, object]:
        """Return foods expiring and remote events starting on a day."""
        view = await _get_container(request).pantry_service.day_view(day)
        return {
            "day": view.day.isoformat(),
            "foods": [_food_out(item) for item in view.foods],
            "events": [_event_out(event) for event in view.events],
        }

    @app.get("/calendar/{year}/{month}", dependencies=protected)
    async def calendar_month(year: int, month: int, request: Request) -> dict[str, object]:
        """Return the month grid with expiry and event markers."""
        if not 1 <= month <= 12:  # noqa: PLR2004
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)
        view = await _get_container(request).pantry_service.month_view(year, month)
        return {
            "year": view.year,
            "month": view.month,
            "cells": [
                {
                    "day": cell.day.isoformat(),
                    "in_month": cell.in_month,
                    "has_expiry": cell.day in view.expiry_dates,
                    "has_event": cell.day in view.event_dates,
                }
                for cell in view.cells
            ],
        }

    @app.post("/calendar/connect", dependencies=protected)
    async def calendar_connect(request: Request) -> dict[str, object]:
        """Connect the remote calendar using silent reauthentication."""
        sync = _get_container(request).calendar_sync_service
        result = await sync.connect()
        if isinstance(result, SyncFailure):
            logger.info("Calendar connect did not complete: %s", result.kind.value)
            return {
                "connected": False,
                "reason": result.kind.value,
                "detail": result.detail,
            }
        return {"connected": True}

    @app.post("/calendar/disconnect", dependencies=protected)
    async def calendar_disconnect(request: Request) -> dict[str, bool]:
        """Disconnect the remote calendar."""
        await _get_container(request).calendar_sync_service.disconnect()
        return {"connected": False}

    @app.delete("/calendar/events/{event_id}", dependencies=protected)
    async def calendar_delete_event(event_id: str, request: Request) -> dict[str, object]:
        """Delete an event from the dedicated calendar."""
        result = await _get_container(request).calendar_sync_service.delete_event(
            event_id
        )
        if isinstance(result, SyncFailure):
            return {"deleted": False, "reason": result.kind.value, "detail": result.detail}
        return {"deleted": True}

    return app


def _category_out(category: Category) -> dict[str, object]:
    return CategoryOut(id=category.id, name=category.name).model_dump()


def _food_out(item: FoodWithCategory) -> dict[str, object]:
    food: Food = item.food
    return FoodOut(
        id=food.id,
        name=food.name,
        expiry_date=food.expiry_date,
        remaining_percentage=food.remaining_percentage,
        created_at=food.created_at,
        category=CategoryOut(id=item.category.id, name=item.category.name),
    ).model_dump(mode="json")


def _event_out(event: CalendarEvent) -> dict[str, object]:
    return CalendarEventOut(
        id=event.id,
        title=event.title,
        start_time=event.start_time,
        end_time=event.end_time,
        is_all_day=event.is_all_day,
    ).model_dump(mode="json")
