"""Duplicate-issue heuristic run while an issue is being composed.

The check is a cheap textual comparison over the full issue set, which is
fine for an administrative tracker of modest size. It is intentionally loose:
a very short candidate title (a single word, or even a single letter) is
contained in many existing titles and will flag them all. That false-positive
source is accepted; callers gate the check with :func:`should_check_similar`
to avoid warning on barely-typed input.
"""

from __future__ import annotations

from typing import List, Sequence

from .models import IssueEntity

MIN_TITLE_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 10
MIN_TOKEN_LENGTH = 3
MIN_SHARED_TOKENS = 2


# PUBLIC_INTERFACE
def should_check_similar(title: str, description: str) -> bool:
    """Return True once the draft is long enough to be worth comparing."""
    return len(title.strip()) > MIN_TITLE_LENGTH or len(description.strip()) > MIN_DESCRIPTION_LENGTH


def _shared_token_count(candidate: str, existing: str) -> int:
    existing_tokens = existing.split()
    return sum(
        1 for token in candidate.split() if len(token) > MIN_TOKEN_LENGTH and token in existing_tokens
    )


def _descriptions_overlap(candidate: str, existing: str) -> bool:
    if not candidate.strip() or not existing.strip():
        return False
    return candidate in existing or existing in candidate


def is_similar(title: str, description: str, issue: IssueEntity) -> bool:
    """
    Compare a lower-cased candidate against one existing issue.

    Matches on any of: title containment in either direction, at least two
    shared title words longer than three characters, or description
    containment in either direction when both descriptions are non-blank.
    """
    issue_title = (issue.get("title") or "").lower()
    issue_description = (issue.get("description") or "").lower()

    if issue_title in title or title in issue_title:
        return True
    if _shared_token_count(title, issue_title) >= MIN_SHARED_TOKENS:
        return True
    return _descriptions_overlap(description, issue_description)


# PUBLIC_INTERFACE
def find_similar(title: str, description: str, existing: Sequence[IssueEntity]) -> List[IssueEntity]:
    """
    Return the existing issues that look like duplicates of the candidate.

    An empty (or blank) candidate title short-circuits to an empty list
    without scanning. Results keep the order of ``existing``.
    """
    if not title.strip():
        return []

    title_lower = title.lower()
    description_lower = (description or "").lower()
    return [issue for issue in existing if is_similar(title_lower, description_lower, issue)]
