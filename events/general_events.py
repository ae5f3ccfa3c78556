"""
General runtime events
"""

import logging

from core.registry import event
from services.service_manager import get_service_manager

logger = logging.getLogger('archon.events.general_events')


class GeneralEvents:

    @event('ready', once=True)
    def on_ready(self):
        client = get_service_manager().get_client()
        logger.info(f"Archon is online as {client.user}")
