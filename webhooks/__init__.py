"""
Webhook classes for Archon
"""

from .clockify import ClockifyWebhooks

WEBHOOK_CLASSES = [ClockifyWebhooks]

__all__ = ['ClockifyWebhooks', 'WEBHOOK_CLASSES']
