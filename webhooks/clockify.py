"""
Clockify webhooks

Turns Clockify time entry events into announcements on the
``clockify_events`` channel(s).
"""

import logging
from typing import Any, Dict, List, Optional

from core.registry import webhook
from services.notification_service import AnnouncementField, AnnouncementOptions
from services.service_manager import get_service_manager
from utils.parsing import parse_duration
from .models import ClockifyTimeEntry

logger = logging.getLogger('archon.webhooks.clockify')

CLOCKIFY_EVENT_KEY = "clockify_events"

START_COLOR = 0x00bcd4
STOP_COLOR = 0xffa500
DELETE_COLOR = 0xff4500


def format_duration(duration: Optional[str]) -> str:
    """Human readable duration, or "Unknown" when missing or malformed"""
    if not duration:
        return "Unknown"
    try:
        return parse_duration(duration)
    except ValueError:
        logger.warning(f"[Clockify] Unparseable duration: {duration}")
        return "Unknown"


class ClockifyWebhooks:

    async def _user_avatar(self, user_id: str) -> Optional[str]:
        profile = await get_service_manager().get_clockify_service().get_user(user_id)
        return (profile or {}).get('imageUrl') or None

    async def _announce(
        self,
        entry: ClockifyTimeEntry,
        title: str,
        color: int,
        fields: List[AnnouncementField]
    ) -> int:
        notification_service = get_service_manager().get_notification_service()
        avatar = await self._user_avatar(entry.user.id)
        return await notification_service.send_announcement(
            CLOCKIFY_EVENT_KEY,
            AnnouncementOptions(
                title=title,
                color=color,
                fields=fields,
                footer=f"User: {entry.user.name}",
                icon_url=avatar,
                timestamp=True
            )
        )

    @webhook('/clockify/start')
    async def create_entry(self, payload: Dict[str, Any]) -> str:
        entry = ClockifyTimeEntry.model_validate(payload)
        logger.info(f"[Clockify] Time entry started by {entry.user.name} at {entry.time_interval.start}")

        await self._announce(entry, "Clockify: Time Entry Started", START_COLOR, [
            AnnouncementField("Description", entry.description or "No Description"),
            AnnouncementField("Start Time", entry.time_interval.start, inline=True),
            AnnouncementField("Currently Running", "Yes" if entry.currently_running else "No", inline=True),
        ])
        return 'Clockify create webhook processed.'

    @webhook('/clockify/stop')
    async def stop_entry(self, payload: Dict[str, Any]) -> str:
        entry = ClockifyTimeEntry.model_validate(payload)
        logger.info(f"[Clockify] Time entry stopped by {entry.user.name} at {entry.time_interval.start}")

        await self._announce(entry, "Clockify: Time Entry Stopped", STOP_COLOR, [
            AnnouncementField("Description", entry.description or "No Description"),
            AnnouncementField("Start Time", entry.time_interval.start, inline=True),
            AnnouncementField("End Time", entry.time_interval.end or "Unknown", inline=True),
            AnnouncementField("Duration", format_duration(entry.time_interval.duration)),
        ])
        return 'Clockify stop webhook processed.'

    @webhook('/clockify/delete')
    async def delete_entry(self, payload: Dict[str, Any]) -> str:
        entry = ClockifyTimeEntry.model_validate(payload)
        logger.info(f"[Clockify] Time entry deleted by {entry.user.name}: ID {entry.id}")

        await self._announce(entry, "Clockify: Time Entry Deleted", DELETE_COLOR, [
            AnnouncementField("Description", entry.description or "No Description"),
            AnnouncementField("Duration", format_duration(entry.time_interval.duration)),
            AnnouncementField("Billable", "Yes" if entry.billable else "No", inline=True),
            AnnouncementField("Entry ID", entry.id or "Unknown", inline=True),
            AnnouncementField("Deleted By", entry.user.name, inline=True),
        ])
        return 'Clockify delete webhook processed.'
