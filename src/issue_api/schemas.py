from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Priority, Status


def _strip_required(value: str, field: str, max_length: int) -> str:
    s = value.strip()
    if not (1 <= len(s) <= max_length):
        raise ValueError(f"{field} length must be between 1 and {max_length} characters")
    return s


# PUBLIC_INTERFACE
class IssueDraft(BaseModel):
    """
    Form state of an issue being composed.

    Every field has a default so a half-filled form can be checked for
    similar issues as the user types.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Login button broken",
                "description": "Clicking login does nothing on Safari",
                "priority": "Medium",
                "status": "Open",
                "assigned_to": "",
            }
        }
    )

    title: str = Field(default="", description="Issue title as typed so far")
    description: str = Field(default="", description="Issue description as typed so far")
    priority: Priority = Field(default=Priority.MEDIUM, description="Selected priority")
    status: Status = Field(default=Status.OPEN, description="Selected initial status")
    assigned_to: str = Field(default="", description="Email or name of the assignee")


# PUBLIC_INTERFACE
class IssueCreate(BaseModel):
    """
    Schema for creating a new issue.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Login button broken",
                "description": "Clicking login does nothing on Safari",
                "priority": "High",
                "status": "Open",
                "assigned_to": "dev@example.com",
            }
        }
    )

    title: str = Field(..., description="Short summary of the issue", min_length=1, max_length=200)
    description: str = Field(..., description="Detailed description", min_length=1)
    priority: Priority = Field(default=Priority.MEDIUM, description="Issue priority")
    status: Status = Field(default=Status.OPEN, description="Initial status")
    assigned_to: str = Field(default="", description="Email or name of the assignee")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _strip_required(v, "title", 200)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return _strip_required(v, "description", 10000)

    @field_validator("assigned_to")
    @classmethod
    def strip_assignee(cls, v: str) -> str:
        return v.strip()


# PUBLIC_INTERFACE
class StatusUpdate(BaseModel):
    """Requested status for an existing issue."""

    model_config = ConfigDict(json_schema_extra={"example": {"status": "In Progress"}})

    status: Status = Field(..., description="New status")


# PUBLIC_INTERFACE
class IssueOut(BaseModel):
    """
    Schema returned by the API for an issue.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f2c9a0e5b1d4c7e8a6f0b2d4e6a8c0e",
                "title": "Login button broken",
                "description": "Clicking login does nothing on Safari",
                "priority": "High",
                "status": "Open",
                "assigned_to": "dev@example.com",
                "created_time": "2025-01-25T10:15:30.123456",
                "created_by": "reporter@example.com",
            }
        }
    )

    id: str = Field(..., description="Store-assigned identifier")
    title: str = Field(..., description="Short summary of the issue")
    description: str = Field(..., description="Detailed description")
    priority: Priority = Field(..., description="Issue priority")
    status: Status = Field(..., description="Current status")
    assigned_to: str = Field(default="", description="Email or name of the assignee")
    created_time: datetime = Field(..., description="Creation timestamp")
    created_by: str = Field(..., description="Email of the user who created the issue")


class IssueListing(BaseModel):
    """
    Envelope for issue listings.
    """

    items: List[IssueOut] = Field(..., description="Issues matching the filters, newest first")
    shown: int = Field(..., description="Number of issues matching the filters")
    total: int = Field(..., description="Number of issues before filtering")


class SimilarIssues(BaseModel):
    """
    Result of the duplicate check for a draft.
    """

    checked: bool = Field(..., description="False when the draft was too short to compare")
    count: int = Field(..., description="Number of similar issues found")
    items: List[IssueOut] = Field(..., description="All similar issues, in listing order")
    preview: List[IssueOut] = Field(..., description="The first few similar issues for display")
    remaining: int = Field(..., description="Similar issues not included in the preview")


class Credentials(BaseModel):
    """
    Email/password pair for sign-up and sign-in.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "reporter@example.com", "password": "s3cret-pass"}}
    )

    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Account password")


class UserOut(BaseModel):
    """
    Public view of a registered account.
    """

    email: str = Field(..., description="Account email")
    disabled: bool = Field(..., description="Whether the account is disabled")
    created_at: datetime = Field(..., description="Registration timestamp")


class ErrorOut(BaseModel):
    """
    Body returned for auth/store failures.
    """

    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable message")
    items: Optional[List[IssueOut]] = Field(default=None, description="Related issues, if any")
