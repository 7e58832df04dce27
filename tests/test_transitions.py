import pytest

from issue_api.models import Status
from issue_api.transitions import is_transition_allowed


class TestTransitionGuard:
    def test_open_to_done_is_refused(self):
        assert is_transition_allowed(Status.OPEN, Status.DONE) is False

    @pytest.mark.parametrize(
        "current,requested",
        [
            (Status.OPEN, Status.IN_PROGRESS),
            (Status.IN_PROGRESS, Status.DONE),
            (Status.IN_PROGRESS, Status.OPEN),
            (Status.DONE, Status.OPEN),
            (Status.DONE, Status.IN_PROGRESS),
        ],
    )
    def test_other_moves_are_allowed(self, current, requested):
        assert is_transition_allowed(current, requested) is True

    @pytest.mark.parametrize("status", list(Status))
    def test_staying_put_is_allowed(self, status):
        assert is_transition_allowed(status, status) is True

    def test_accepts_stored_string_values(self):
        assert is_transition_allowed("Open", "Done") is False
        assert is_transition_allowed("Open", "In Progress") is True
