"""Typed failure outcomes raised by the report lifecycle core.

Every failure path of a core operation raises exactly one of these classes.
Callers branch on the class (or its ``code``); the HTTP layer maps each class
to a status code in a single table.
"""

from __future__ import annotations


class LitterPickError(RuntimeError):
    """Base class for all expected core failures."""

    code = "error"
    retryable = False

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message())
        self.message = message or self.default_message()

    @classmethod
    def default_message(cls) -> str:
        return cls.__doc__.strip().splitlines()[0] if cls.__doc__ else cls.code


class NotFound(LitterPickError):
    """The referenced record does not exist."""

    code = "not_found"


class ReportNotFound(NotFound):
    """Report not found."""

    code = "report_not_found"


class UserNotFound(NotFound):
    """User not found."""

    code = "user_not_found"


class ConflictError(LitterPickError):
    """Someone beat you to it; refresh and pick again."""

    code = "conflict"


class AlreadyClaimed(ConflictError):
    """Someone else already claimed this report."""

    code = "already_claimed"


class InvalidState(ConflictError):
    """The report is no longer in a state that allows this action."""

    code = "invalid_state"


class IllegalTransition(InvalidState):
    """The requested status change is not an edge of the report state machine."""

    code = "illegal_transition"


class NotOwner(LitterPickError):
    """Only the user holding the claim can do that."""

    code = "not_owner"


class VerificationRejected(LitterPickError):
    """The verification vote was rejected."""

    code = "verification_rejected"


class NotClearable(VerificationRejected):
    """Only cleared reports can be verified."""

    code = "not_clearable"


class SelfVerification(VerificationRejected):
    """You cannot verify a report you cleared."""

    code = "self_verification"


class InsufficientExperience(VerificationRejected):
    """You need more clears before you can verify others."""

    code = "insufficient_experience"


class DuplicateVote(VerificationRejected):
    """You have already voted on this report."""

    code = "duplicate_vote"


class CommentRequired(VerificationRejected):
    """A comment is required when disputing a clear."""

    code = "comment_required"


class EmailNotVerified(LitterPickError):
    """Email must be verified to create reports."""

    code = "email_not_verified"


class InvalidQuery(LitterPickError):
    """The query parameters are not valid."""

    code = "invalid_query"


class StoreUnavailable(LitterPickError):
    """The data store is temporarily unavailable; retry the same request."""

    code = "store_unavailable"
    retryable = True


__all__ = [
    "AlreadyClaimed",
    "CommentRequired",
    "ConflictError",
    "DuplicateVote",
    "EmailNotVerified",
    "IllegalTransition",
    "InsufficientExperience",
    "InvalidQuery",
    "InvalidState",
    "LitterPickError",
    "NotClearable",
    "NotFound",
    "NotOwner",
    "ReportNotFound",
    "SelfVerification",
    "StoreUnavailable",
    "UserNotFound",
    "VerificationRejected",
]
