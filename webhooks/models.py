"""
Clockify webhook payload models

Pydantic models for the subset of the Clockify time entry payload the bot
announces. Unknown fields are ignored.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ClockifyUser(BaseModel):
    """User who owns the time entry"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Clockify user ID")
    name: str = Field(..., description="Display name")


class TimeInterval(BaseModel):
    """Start, end and ISO-8601 duration of a time entry"""
    model_config = ConfigDict(populate_by_name=True)

    start: str = Field(..., description="Start timestamp")
    end: Optional[str] = Field(None, description="End timestamp, unset while running")
    duration: Optional[str] = Field(None, description="ISO-8601 duration, e.g. PT1H30M")


class ClockifyTimeEntry(BaseModel):
    """Time entry as posted by Clockify webhooks"""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Time entry ID")
    description: Optional[str] = Field(None, description="Entry description")
    billable: bool = Field(False, description="Whether the entry is billable")
    currently_running: bool = Field(False, alias="currentlyRunning", description="Timer still running")
    time_interval: TimeInterval = Field(..., alias="timeInterval")
    user: ClockifyUser
