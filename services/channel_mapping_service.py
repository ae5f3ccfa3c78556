"""
Channel Mapping Service for Archon

Maps semantic event keys (``clockify_events``, ``server_announcement``...)
to Discord channel ids. Defaults come from configuration; overrides are
persisted to a JSON file shaped like::

    {
        "events": {"clockify_events": "123", "log_event": ["456", "789"]},
        "default": "111"
    }
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from core.errors import UnknownEventKey

logger = logging.getLogger('archon.services.channel_mapping_service')

ChannelTarget = Union[str, List[str]]

# Event keys known to the bot, with the configuration field that seeds them
EVENT_CHANNEL_SETTINGS = {
    'log_event': 'log_channel_id',
    'server_announcement': 'announcement_channel_id',
    'clockify_events': 'clockify_channel_id',
    'dev_commands': 'dev_commands_channel_id',
}


@dataclass
class ChannelMappings:
    """Event-to-channel mappings plus a fallback channel"""
    events: Dict[str, ChannelTarget] = field(default_factory=dict)
    default: str = ""

    @classmethod
    def from_config(cls, config: Any) -> 'ChannelMappings':
        return cls(
            events={key: getattr(config, setting, "") or "" for key, setting in EVENT_CHANNEL_SETTINGS.items()},
            default=getattr(config, 'default_channel_id', "") or ""
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChannelMappings':
        if not isinstance(data, dict):
            raise ValueError("Channel mappings must be a JSON object")
        events = data.get('events') or {}
        if not isinstance(events, dict):
            raise ValueError("'events' must be a JSON object")
        return cls(
            events={str(key): _normalize_target(value) for key, value in events.items()},
            default=str(data.get('default') or "")
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'events': {key: list(value) if isinstance(value, list) else value for key, value in self.events.items()},
            'default': self.default
        }

    def copy(self) -> 'ChannelMappings':
        return ChannelMappings.from_dict(self.to_dict())


def _normalize_target(value: Any) -> ChannelTarget:
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item]
    if value is None:
        return ""
    return str(value)


class ChannelMappingService:
    """
    Manages the channel mappings: loading, overriding and resetting.

    The in-memory mapping is authoritative. Every mutation rewrites the whole
    file; a failed write is logged and does not undo the in-memory change.
    """

    def __init__(self, defaults: ChannelMappings, file_path: Union[str, Path] = "./config/channelMappings.json"):
        self.file_path = Path(file_path)
        self._defaults = defaults.copy()
        self._current = self._initialize_channel_mappings()
        logger.info(f"ChannelMappingService initialized from {self.file_path}")

    @property
    def defaults(self) -> ChannelMappings:
        return self._defaults.copy()

    def _initialize_channel_mappings(self) -> ChannelMappings:
        file_data: Optional[Dict[str, Any]] = None
        file_mappings: Optional[ChannelMappings] = None

        if self.file_path.exists():
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    file_data = json.load(f)
                file_mappings = ChannelMappings.from_dict(file_data)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to read channel mappings file. Falling back to defaults: {e}")
                file_data = None
                file_mappings = None

        merged = self._defaults.copy()
        if file_mappings is not None:
            for key, value in file_mappings.events.items():
                if value:
                    merged.events[key] = value
            if file_mappings.default:
                merged.default = file_mappings.default

        if file_data is None or file_data != merged.to_dict():
            self._save_mappings_to_file(merged)

        return merged

    def _save_mappings_to_file(self, mappings: ChannelMappings) -> bool:
        tmp_path = self.file_path.with_name(self.file_path.name + '.tmp')
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(mappings.to_dict(), f, indent=4)
            os.replace(tmp_path, self.file_path)
            logger.debug("Channel mappings saved to file.")
            return True
        except OSError as e:
            logger.error(f"Failed to save channel mappings to file: {e}")
            return False

    def get_channel_mappings(self) -> ChannelMappings:
        """Get a copy of the current mappings"""
        return self._current.copy()

    def resolve(self, event_key: Optional[str] = None) -> ChannelTarget:
        """
        Get the channel(s) for an event key.

        ``None`` and keys without a channel resolve to the default channel.
        """
        if event_key is None:
            return self._current.default
        target = self._current.events.get(event_key)
        if not target:
            return self._current.default
        return list(target) if isinstance(target, list) else target

    def resolve_channel_ids(self, event_key: Optional[str] = None) -> List[str]:
        """Like ``resolve`` but always a list, with empty ids dropped"""
        target = self.resolve(event_key)
        ids = target if isinstance(target, list) else [target]
        return [channel_id for channel_id in ids if channel_id]

    def override_event_channel(self, event_key: str, channel_id: ChannelTarget) -> None:
        """Point ``event_key`` at ``channel_id`` (one id or a list) and persist"""
        self._current.events[event_key] = _normalize_target(channel_id)
        self._save_mappings_to_file(self._current)
        logger.info(f'Channel ID for event "{event_key}" overridden to "{channel_id}".')

    def reset_event_channel(self, event_key: str) -> None:
        """
        Restore the default channel for one event key.

        Raises:
            UnknownEventKey: If the key is not one of the default keys
        """
        if event_key not in self._defaults.events:
            raise UnknownEventKey(event_key)
        default = self._defaults.events[event_key]
        self._current.events[event_key] = list(default) if isinstance(default, list) else default
        self._save_mappings_to_file(self._current)
        logger.info(f'Channel ID for event "{event_key}" reset to default')

    def reset_all_mappings(self) -> None:
        """Restore every mapping to its default"""
        self._current = self._defaults.copy()
        self._save_mappings_to_file(self._current)
        logger.info("All default channel mappings set.")
