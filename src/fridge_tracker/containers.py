"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from fridge_tracker.adapters.google_calendar_client import HttpxGoogleCalendarClient
from fridge_tracker.adapters.google_identity_broker import GoogleOAuthIdentityBroker
from fridge_tracker.adapters.supabase_record_store import SupabaseRecordStore
from fridge_tracker.config import Settings
from fridge_tracker.services.calendar_sync import CalendarSyncService
from fridge_tracker.services.identity import IdentityBroker
from fridge_tracker.services.inventory import InventoryService
from fridge_tracker.services.pantry import PantryService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_broker: IdentityBroker
    inventory_service: InventoryService
    calendar_sync_service: CalendarSyncService
    pantry_service: PantryService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container.

    The record store is built exactly once here and shared by every consumer.
    """
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    record_store = SupabaseRecordStore(supabase_client)
    inventory_service = InventoryService(record_store)
    identity_broker = GoogleOAuthIdentityBroker.create(
        client_id=resolved_settings.google_client_id,
        client_secret=resolved_settings.google_client_secret,
        refresh_token=resolved_settings.google_refresh_token,
        token_url=resolved_settings.google_token_url,
        revoke_url=resolved_settings.google_revoke_url,
    )
    calendar_client = HttpxGoogleCalendarClient.create(
        resolved_settings.google_api_base_url
    )
    calendar_sync_service = CalendarSyncService(
        identity_broker=identity_broker,
        calendar_client=calendar_client,
        timezone=resolved_settings.tzinfo,
        calendar_name=resolved_settings.food_calendar_name,
        calendar_time_zone=resolved_settings.timezone,
        calendar_color_id=resolved_settings.food_calendar_color_id,
    )
    pantry_service = PantryService(
        inventory=inventory_service,
        timezone=resolved_settings.tzinfo,
        calendar_sync=calendar_sync_service,
    )

    async def close_resources() -> None:
        pantry_service.close()
        await identity_broker.close()
        await calendar_client.close()

    return AppContainer(
        settings=resolved_settings,
        identity_broker=identity_broker,
        inventory_service=inventory_service,
        calendar_sync_service=calendar_sync_service,
        pantry_service=pantry_service,
        close_resources=close_resources,
    )
