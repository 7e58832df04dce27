from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from ..auth import get_current_user
from ..models import IssueEntity, Priority, Status, UserEntity
from ..repositories import IssueFilter, IssueRepository, get_issue_repository
from ..schemas import ErrorOut, IssueCreate, IssueDraft, IssueListing, IssueOut, SimilarIssues, StatusUpdate
from ..similarity import find_similar, should_check_similar
from ..store import StoreError
from ..transitions import TRANSITION_REJECTED_MESSAGE, is_transition_allowed
from ..utils import listing_envelope, similar_envelope

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/issues",
    tags=["issues"],
)

CREATE_FAILED_MESSAGE = "Failed to create issue. Please try again."
LOAD_FAILED_MESSAGE = "Failed to load issues"
UPDATE_FAILED_MESSAGE = "Failed to update status"
SIMILAR_FAILED_MESSAGE = "Failed to check for similar issues"


def _out(issue: IssueEntity) -> IssueOut:
    return IssueOut(**issue)  # type: ignore[arg-type]


def _similar_for(repo: IssueRepository, title: str, description: str) -> list:
    """Apply the length gate, then scan the full issue set."""
    if not should_check_similar(title, description):
        return []
    return find_similar(title, description, repo.all())


# PUBLIC_INTERFACE
@router.post(
    "/similar",
    response_model=SimilarIssues,
    summary="Check Similar Issues",
    description=(
        "Compare a draft against every existing issue and return the likely duplicates. "
        "Drafts with a title of 5 characters or fewer and a description of 10 characters or "
        "fewer are not compared (checked=false)."
    ),
    responses={
        200: {"description": "Check completed"},
        503: {"description": "Store unavailable"},
    },
)
def check_similar(
    draft: IssueDraft,
    repo: IssueRepository = Depends(get_issue_repository),
    user: UserEntity = Depends(get_current_user),
) -> SimilarIssues:
    """
    Duplicate check for the issue being composed.
    """
    checked = should_check_similar(draft.title, draft.description)
    try:
        similar = _similar_for(repo, draft.title, draft.description)
    except StoreError as exc:
        logger.error("Error checking similar issues: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=SIMILAR_FAILED_MESSAGE)
    return SimilarIssues(**similar_envelope([_out(i) for i in similar], checked=checked))


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=IssueOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Issue",
    description=(
        "Create a new issue owned by the authenticated user. When similar issues exist the "
        "request is refused with 409 and the list of matches unless confirm=true is passed."
    ),
    responses={
        201: {"description": "Issue created successfully"},
        409: {"model": ErrorOut, "description": "Similar issues found; resend with confirm=true"},
        503: {"description": "Store unavailable"},
    },
)
def create_issue(
    payload: IssueCreate,
    confirm: bool = Query(False, description="Create even if similar issues exist"),
    repo: IssueRepository = Depends(get_issue_repository),
    user: UserEntity = Depends(get_current_user),
):
    """
    Create a new issue.
    """
    try:
        if not confirm:
            similar = _similar_for(repo, payload.title, payload.description)
            if similar:
                body = ErrorOut(
                    error="SimilarIssuesFound",
                    message=f"Found {len(similar)} similar issue(s). Do you still want to create this issue?",
                    items=[_out(i) for i in similar],
                )
                return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump(mode="json"))
        created = repo.create(payload, created_by=user["email"])
    except StoreError as exc:
        logger.error("Error creating issue: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=CREATE_FAILED_MESSAGE)
    return _out(created)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=IssueListing,
    summary="List Issues",
    description=(
        "List all issues, newest first.\n\n"
        "Query parameters:\n"
        "- status: only issues with this status (Open, In Progress, Done)\n"
        "- priority: only issues with this priority (Low, Medium, High)\n\n"
        "The envelope reports how many issues matched (shown) out of the total."
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        503: {"description": "Store unavailable"},
    },
)
def list_issues(
    status_filter: Optional[Status] = Query(None, alias="status", description="Filter by status"),
    priority: Optional[Priority] = Query(None, description="Filter by priority"),
    repo: IssueRepository = Depends(get_issue_repository),
    user: UserEntity = Depends(get_current_user),
) -> IssueListing:
    """
    List issues with optional status/priority filters.
    """
    try:
        items, total = repo.list(IssueFilter(status=status_filter, priority=priority))
    except StoreError as exc:
        logger.error("Error fetching issues: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=LOAD_FAILED_MESSAGE)
    return IssueListing(**listing_envelope([_out(i) for i in items], total))


# PUBLIC_INTERFACE
@router.get(
    "/{issue_id}",
    response_model=IssueOut,
    summary="Get Issue",
    description="Get a single issue by ID.",
    responses={
        200: {"description": "Issue found"},
        404: {"description": "Issue not found"},
    },
)
def get_issue(
    issue_id: str,
    repo: IssueRepository = Depends(get_issue_repository),
    user: UserEntity = Depends(get_current_user),
) -> IssueOut:
    """
    Retrieve a single issue by its ID.
    """
    try:
        item = repo.get(issue_id)
    except StoreError as exc:
        logger.error("Error fetching issue %s: %s", issue_id, exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=LOAD_FAILED_MESSAGE)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")
    return _out(item)


# PUBLIC_INTERFACE
@router.patch(
    "/{issue_id}/status",
    response_model=IssueOut,
    summary="Change Issue Status",
    description=(
        "Move an issue to a new status. Open issues must pass through In Progress before "
        "they can be Done; the direct move is refused with 409 and nothing is written."
    ),
    responses={
        200: {"description": "Status updated"},
        404: {"description": "Issue not found"},
        409: {"description": "Transition not allowed"},
        503: {"description": "Store unavailable"},
    },
)
def change_status(
    issue_id: str,
    payload: StatusUpdate,
    repo: IssueRepository = Depends(get_issue_repository),
    user: UserEntity = Depends(get_current_user),
) -> IssueOut:
    """
    Apply a status change after checking the transition rules.
    """
    try:
        item = repo.get(issue_id)
    except StoreError as exc:
        logger.error("Error fetching issue %s: %s", issue_id, exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=UPDATE_FAILED_MESSAGE)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")

    if not is_transition_allowed(item["status"], payload.status):
        logger.info("Refused %s -> %s for issue %s", item["status"], payload.status.value, issue_id)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=TRANSITION_REJECTED_MESSAGE)

    try:
        updated = repo.update_status(issue_id, payload.status)
    except StoreError as exc:
        logger.error("Error updating status of %s: %s", issue_id, exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=UPDATE_FAILED_MESSAGE)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")
    item["status"] = payload.status.value
    return _out(item)
