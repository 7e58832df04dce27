from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import Depends

from .models import (
    ISSUES_COLLECTION,
    USERS_COLLECTION,
    IssueDocument,
    IssueEntity,
    Priority,
    Status,
    UserEntity,
)
from .schemas import IssueCreate
from .store import DocumentStore, get_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssueFilter:
    """
    Optional equality filters for listing issues.
    """
    status: Optional[Status] = None
    priority: Optional[Priority] = None

    def as_query(self) -> dict:
        query = {}
        if self.status is not None:
            query["status"] = self.status.value
        if self.priority is not None:
            query["priority"] = self.priority.value
        return query


# PUBLIC_INTERFACE
class IssueRepository:
    """Issue persistence on top of a document store."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def _now(self) -> datetime:
        return datetime.now()

    def create(self, data: IssueCreate, created_by: str) -> IssueEntity:
        """Insert a new issue and return it with its store-assigned id."""
        document: IssueDocument = {
            "title": data.title,
            "description": data.description,
            "priority": data.priority.value,
            "status": data.status.value,
            "assigned_to": data.assigned_to,
            "created_time": self._now(),
            "created_by": created_by,
        }
        doc_id = self._store.insert_one(ISSUES_COLLECTION, document)
        logger.info("Issue %s created by %s", doc_id, created_by)
        return {**document, "id": doc_id}  # type: ignore[return-value]

    def get(self, issue_id: str) -> Optional[IssueEntity]:
        return self._store.get(ISSUES_COLLECTION, issue_id)  # type: ignore[return-value]

    def all(self) -> List[IssueEntity]:
        """Every issue, in store order; used for the duplicate scan."""
        return self._store.find(ISSUES_COLLECTION)  # type: ignore[return-value]

    def list(self, issue_filter: Optional[IssueFilter] = None) -> Tuple[List[IssueEntity], int]:
        """
        Return issues matching the filter, newest first, and the unfiltered total.
        """
        f = issue_filter or IssueFilter()
        matching = self._store.find(
            ISSUES_COLLECTION, f.as_query(), order_by="created_time", descending=True
        )
        total = len(self._store.find(ISSUES_COLLECTION)) if f.as_query() else len(matching)
        return matching, total  # type: ignore[return-value]

    def update_status(self, issue_id: str, status: Status) -> bool:
        updated = self._store.update_field(ISSUES_COLLECTION, issue_id, "status", status.value)
        if updated:
            logger.info("Issue %s moved to %s", issue_id, status.value)
        return updated


# PUBLIC_INTERFACE
class UserRepository:
    """Account records of the auth provider."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def get_by_email(self, email: str) -> Optional[UserEntity]:
        found = self._store.find(USERS_COLLECTION, {"email": email.lower()})
        return found[0] if found else None  # type: ignore[return-value]

    def create(self, email: str, password_hash: str) -> UserEntity:
        document = {
            "email": email.lower(),
            "password_hash": password_hash,
            "disabled": False,
            "failed_attempts": 0,
            "last_failed_at": None,
            "created_at": datetime.now(),
        }
        doc_id = self._store.insert_one(USERS_COLLECTION, document)
        return {**document, "id": doc_id}  # type: ignore[return-value]

    def record_failed_signin(self, user_id: str, count: int, when: datetime) -> None:
        self._store.update_field(USERS_COLLECTION, user_id, "failed_attempts", count)
        self._store.update_field(USERS_COLLECTION, user_id, "last_failed_at", when)

    def reset_failed_signins(self, user_id: str) -> None:
        self._store.update_field(USERS_COLLECTION, user_id, "failed_attempts", 0)
        self._store.update_field(USERS_COLLECTION, user_id, "last_failed_at", None)

    def set_disabled(self, user_id: str, disabled: bool) -> None:
        self._store.update_field(USERS_COLLECTION, user_id, "disabled", disabled)


def get_issue_repository(store: DocumentStore = Depends(get_store)) -> IssueRepository:
    return IssueRepository(store)


def get_user_repository(store: DocumentStore = Depends(get_store)) -> UserRepository:
    return UserRepository(store)
