"""
Clockify API client
"""

import logging
from typing import Any, Dict

from .api_service import ApiService

logger = logging.getLogger('archon.services.clockify_service')

DEFAULT_CLOCKIFY_API_URL = 'https://api.clockify.me/api/v1'


class ClockifyService(ApiService):
    """
    Workspace-scoped client for the Clockify REST API.

    Authenticates with the ``X-Api-Key`` header.
    """

    def __init__(
        self,
        api_key: str,
        workspace_id: str,
        base_url: str = DEFAULT_CLOCKIFY_API_URL,
        timeout: int = 10
    ):
        super().__init__(base_url, api_key=api_key, auth_header="X-Api-Key", timeout=timeout)
        self.workspace_id = workspace_id
        if not api_key or not workspace_id:
            logger.warning("Clockify API key or workspace id is not configured")

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        """Get the member profile of a user in the workspace"""
        return await self.get(f"workspaces/{self.workspace_id}/member-profile/{user_id}")

    async def get_time_entry(self, time_entry_id: str) -> Dict[str, Any]:
        return await self.get(f"workspaces/{self.workspace_id}/time-entries/{time_entry_id}")
