from virtual_museum.models.submission import SubmissionStatus as S
from virtual_museum.utils.exceptions import InvalidTransitionError

UPDATE = "update"
SUBMIT_FOR_REVIEW = "submit_for_review"
REVIEW = "review"
PUBLISH = "publish"
DELETE = "delete"

# "to" of None keeps the current status; a tuple lists the allowed outcomes.
SUBMISSION_TRANSITIONS = {
    UPDATE: {"from": [S.PENDING, S.REJECTED], "to": None},
    SUBMIT_FOR_REVIEW: {"from": [S.PENDING], "to": S.UNDER_REVIEW},
    REVIEW: {"from": [S.UNDER_REVIEW], "to": (S.APPROVED, S.REJECTED)},
    PUBLISH: {"from": [S.APPROVED], "to": S.PUBLISHED},
    DELETE: {"from": [S.PENDING, S.REJECTED], "to": None},
}

EDITABLE_STATUSES = frozenset(SUBMISSION_TRANSITIONS[UPDATE]["from"])


class TransitionGuard:
    """Encodes the submission status graph.

    ``resubmitted_as_pending`` lets a resubmitted record pass every guard
    that accepts ``pending``; it is off unless configured.
    """

    def __init__(self, resubmitted_as_pending=False):
        self.resubmitted_as_pending = resubmitted_as_pending

    def sources(self, operation):
        allowed = list(SUBMISSION_TRANSITIONS[operation]["from"])
        if self.resubmitted_as_pending and S.PENDING in allowed:
            allowed.append(S.RESUBMITTED)
        return allowed

    def is_allowed(self, operation, current):
        return S(current) in self.sources(operation)

    def check(self, operation, current, decision=None):
        """Return the target status for ``operation`` or raise."""
        current = S(current)
        if current not in self.sources(operation):
            raise InvalidTransitionError(current.value, operation)

        target = SUBMISSION_TRANSITIONS[operation]["to"]
        if operation == UPDATE:
            return S.RESUBMITTED if current == S.REJECTED else current
        if target is None:
            return current
        if isinstance(target, tuple):
            if decision not in [t.value for t in target]:
                raise InvalidTransitionError(current.value, f"{operation}:{decision}")
            return S(decision)
        return target
