"""
Runtime event binding
"""

import logging
from typing import Any

from core.registry import CapabilityKind, CapabilityRegistry

logger = logging.getLogger('archon.handlers.event_handler')


def register_all_events(registry: CapabilityRegistry, runtime: Any) -> int:
    """
    Attach every registered event handler to the runtime.

    Each owner class is instantiated once; its handlers are bound to that
    instance and subscribed with ``runtime.once`` or ``runtime.on`` depending
    on the entry's ``once`` flag.

    Returns:
        Number of subscriptions made
    """
    total_events = 0
    owners = registry.owners(CapabilityKind.EVENT)

    for owner in owners:
        instance = owner()
        for entry in registry.entries(CapabilityKind.EVENT, owner):
            handler = entry.bind(instance)
            if entry.once:
                runtime.once(entry.name, handler)
            else:
                runtime.on(entry.name, handler)

            logger.debug(f"Registered event: {entry.name} (once: {entry.once})")
            total_events += 1

    logger.info(f"Registered {len(owners)} event modules with a total of {total_events} events.")
    return total_events
