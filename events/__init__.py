"""
Event listener classes for Archon
"""

from .general_events import GeneralEvents

EVENT_CLASSES = [GeneralEvents]

__all__ = ['GeneralEvents', 'EVENT_CLASSES']
