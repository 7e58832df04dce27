from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, TypedDict


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Status(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


ISSUES_COLLECTION = "issues"
USERS_COLLECTION = "users"


# PUBLIC_INTERFACE
class IssueDocument(TypedDict):
    """
    An issue as handed to the document store, before an identifier exists.

    Fields:
    - title: Short summary (trimmed on input via schemas)
    - description: Detailed description
    - priority: Priority value ("Low", "Medium", "High")
    - status: Status value ("Open", "In Progress", "Done")
    - assigned_to: Free-text assignee, empty string when unassigned
    - created_time: Creation timestamp
    - created_by: Email of the authenticated creator
    """

    title: str
    description: str
    priority: str
    status: str
    assigned_to: str
    created_time: datetime
    created_by: str


# PUBLIC_INTERFACE
class IssueEntity(IssueDocument):
    """A persisted issue; ``id`` is assigned by the store."""

    id: str


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """
    A registered account of the auth provider.

    Fields:
    - id: Store-assigned identifier
    - email: Lower-cased, unique sign-in email
    - password_hash: Salted PBKDF2 hash, see auth.hash_password
    - disabled: Disabled accounts cannot sign in
    - failed_attempts: Consecutive failed sign-ins
    - last_failed_at: Time of the most recent failed sign-in, if any
    - created_at: Registration timestamp
    """

    id: str
    email: str
    password_hash: str
    disabled: bool
    failed_attempts: int
    last_failed_at: Optional[datetime]
    created_at: datetime
