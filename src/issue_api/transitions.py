from __future__ import annotations

from typing import FrozenSet, Tuple, Union

from .models import Status

# An issue has to be picked up before it can be finished.
FORBIDDEN_TRANSITIONS: FrozenSet[Tuple[Status, Status]] = frozenset({(Status.OPEN, Status.DONE)})

TRANSITION_REJECTED_MESSAGE = (
    'An issue cannot move directly from Open to Done. Please change it to "In Progress" first.'
)


# PUBLIC_INTERFACE
def is_transition_allowed(current: Union[Status, str], requested: Union[Status, str]) -> bool:
    """
    Return whether an issue may move from ``current`` to ``requested``.

    Only Open -> Done is refused; every other move, including staying put and
    reopening a Done issue, is allowed.
    """
    return (Status(current), Status(requested)) not in FORBIDDEN_TRANSITIONS
