"""
Capability Registry for Archon

Handler classes declare their capabilities with the ``command``, ``event``
and ``webhook`` decorators. The decorators only attach metadata to the
function; nothing is registered until ``CapabilityRegistry.register_owner``
is called for the class during startup, so registration order is the order
of those calls.

Usage:
    class DevCommands:
        @command('ping')
        async def ping(self, message, args):
            await message.reply('Pong!')

    registry = CapabilityRegistry()
    registry.register_owner(DevCommands)
"""

import logging
import types
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import ConfigurationError

logger = logging.getLogger('archon.core.registry')

CAPABILITY_MARKER = '__archon_capabilities__'


class CapabilityKind(Enum):
    """Kinds of capability a handler class can declare"""
    COMMAND = "command"
    EVENT = "event"
    WEBHOOK = "webhook"


@dataclass
class CapabilityEntry:
    """A single registered capability"""
    kind: CapabilityKind
    name: str
    owner: type
    handler: Callable
    metadata: Dict[str, Any] = field(default_factory=dict)
    attribute: Optional[str] = None

    def bind(self, instance: Any) -> Callable:
        """Bind the handler to an instance of its owner class"""
        if self.attribute is not None:
            return getattr(instance, self.attribute)
        return types.MethodType(self.handler, instance)

    @property
    def permissions(self) -> frozenset:
        return self.metadata.get('permissions', frozenset())

    @property
    def once(self) -> bool:
        return bool(self.metadata.get('once', False))

    @property
    def path(self) -> str:
        return self.metadata.get('path', self.name)


class CapabilityTable:
    """
    Owner-indexed table for one capability kind.

    Entries are kept per owning class in insertion order. When ``unique`` is
    set, names must not repeat anywhere in the table.
    """

    def __init__(self, kind: CapabilityKind, unique: bool):
        self.kind = kind
        self.unique = unique
        self._by_owner: Dict[type, List[CapabilityEntry]] = {}
        self._by_name: Dict[str, CapabilityEntry] = {}

    def add(self, entry: CapabilityEntry) -> None:
        if self.unique and entry.name in self._by_name:
            existing = self._by_name[entry.name]
            raise ConfigurationError(
                f'{self.kind.value.capitalize()} "{entry.name}" declared by '
                f'{entry.owner.__name__} is already registered by {existing.owner.__name__}'
            )
        self._by_owner.setdefault(entry.owner, []).append(entry)
        self._by_name.setdefault(entry.name, entry)

    def owners(self) -> List[type]:
        return list(self._by_owner)

    def entries(self, owner: Optional[type] = None) -> List[CapabilityEntry]:
        if owner is not None:
            return list(self._by_owner.get(owner, []))
        return [entry for entries in self._by_owner.values() for entry in entries]

    def get(self, name: str) -> Optional[CapabilityEntry]:
        return self._by_name.get(name)

    def names(self) -> List[str]:
        return list(self._by_name)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._by_owner.values())

    def clear(self) -> None:
        self._by_owner.clear()
        self._by_name.clear()


class CapabilityRegistry:
    """
    Holds the command, event and webhook tables.

    Command names and webhook paths are unique across all classes; a second
    declaration raises ``ConfigurationError``. Event names may repeat, since
    an event can have any number of listeners.
    """

    def __init__(self):
        self._tables: Dict[CapabilityKind, CapabilityTable] = {
            CapabilityKind.COMMAND: CapabilityTable(CapabilityKind.COMMAND, unique=True),
            CapabilityKind.EVENT: CapabilityTable(CapabilityKind.EVENT, unique=False),
            CapabilityKind.WEBHOOK: CapabilityTable(CapabilityKind.WEBHOOK, unique=True),
        }
        self._registered_owners: List[type] = []

    def register(
        self,
        kind: CapabilityKind,
        name: str,
        owner: type,
        handler: Callable,
        metadata: Optional[Dict[str, Any]] = None,
        attribute: Optional[str] = None
    ) -> CapabilityEntry:
        """
        Append an entry to the table for ``kind``.

        Raises:
            ConfigurationError: If the handler is not callable, the name is
                empty, or the name is already taken in a unique table
        """
        if not callable(handler):
            raise ConfigurationError(f'{kind.value.capitalize()} "{name}" must decorate a method')
        name = _normalize_name(kind, name)

        entry = CapabilityEntry(
            kind=kind,
            name=name,
            owner=owner,
            handler=handler,
            metadata=dict(metadata or {}),
            attribute=attribute
        )
        self._tables[kind].add(entry)

        logger.debug(
            f'Registering {kind.value} "{name}" from class "{owner.__name__}" '
            f'- method: "{getattr(handler, "__name__", handler)}"'
        )
        return entry

    def register_owner(self, owner: type) -> int:
        """
        Register every decorated method of ``owner``.

        Methods are visited in definition order. Registering the same class
        twice is a ``ConfigurationError``.

        Returns:
            Number of capabilities registered
        """
        if owner in self._registered_owners:
            raise ConfigurationError(f"{owner.__name__} is already registered")

        count = 0
        for attr_name, member in vars(owner).items():
            func = member.__func__ if isinstance(member, (staticmethod, classmethod)) else member
            for kind, name, metadata in getattr(func, CAPABILITY_MARKER, ()):
                self.register(kind, name, owner, func, metadata, attribute=attr_name)
                count += 1

        if count == 0:
            logger.warning(f"{owner.__name__} declares no capabilities")
        self._registered_owners.append(owner)
        return count

    def register_owners(self, owners: Iterable[type]) -> int:
        return sum(self.register_owner(owner) for owner in owners)

    def table(self, kind: CapabilityKind) -> CapabilityTable:
        return self._tables[kind]

    def owners(self, kind: CapabilityKind) -> List[type]:
        return self._tables[kind].owners()

    def entries(self, kind: CapabilityKind, owner: Optional[type] = None) -> List[CapabilityEntry]:
        return self._tables[kind].entries(owner)

    def get(self, kind: CapabilityKind, name: str) -> Optional[CapabilityEntry]:
        return self._tables[kind].get(_normalize_name(kind, name))

    def names(self, kind: CapabilityKind) -> List[str]:
        return self._tables[kind].names()

    def clear(self) -> None:
        for table in self._tables.values():
            table.clear()
        self._registered_owners.clear()


def _normalize_name(kind: CapabilityKind, name: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(f"{kind.value.capitalize()} name must be a non-empty string")
    name = name.strip()
    if kind is CapabilityKind.COMMAND:
        return name.casefold()
    if kind is CapabilityKind.WEBHOOK and not name.startswith('/'):
        return '/' + name
    return name


def _mark(kind: CapabilityKind, name: str, metadata: Dict[str, Any]) -> Callable:
    """Build a decorator that attaches a capability marker to a function"""
    _normalize_name(kind, name)

    def decorator(func: Callable) -> Callable:
        if not callable(func):
            raise ConfigurationError(f'{kind.value.capitalize()} "{name}" must decorate a method')
        markers = list(getattr(func, CAPABILITY_MARKER, ()))
        markers.append((kind, name, metadata))
        setattr(func, CAPABILITY_MARKER, tuple(markers))
        return func

    return decorator


def command(name: str, permissions: Iterable[str] = ()) -> Callable:
    """
    Declare a prefix command.

    Args:
        name: Command name, matched case-insensitively
        permissions: discord.py permission flag names the invoking member needs
    """
    return _mark(CapabilityKind.COMMAND, name, {'permissions': frozenset(permissions)})


def event(name: str, once: bool = False) -> Callable:
    """
    Declare a runtime event listener.

    Args:
        name: Event name as dispatched by the client (``ready``, ``message``...)
        once: Detach after the first occurrence
    """
    return _mark(CapabilityKind.EVENT, name, {'once': once})


def webhook(path: str) -> Callable:
    """Declare an HTTP POST webhook route"""
    return _mark(CapabilityKind.WEBHOOK, path, {'path': _normalize_name(CapabilityKind.WEBHOOK, path)})


# Global capability registry instance
_global_registry: Optional[CapabilityRegistry] = None


def get_capability_registry() -> CapabilityRegistry:
    """Get the global capability registry instance"""
    global _global_registry
    if _global_registry is None:
        _global_registry = CapabilityRegistry()
    return _global_registry
