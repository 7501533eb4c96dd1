"""
FAQ Bot Exceptions

A no-match is not an error: it is reported as MatchResult.matched=False and
produces no response at all. Everything below is an explicit failure.
"""

from typing import Optional


class FAQBotError(Exception):
    """Base class for all FAQ bot failures."""

    pass


# Precondition violations (fatal, abort the request)


class PreconditionViolation(FAQBotError):
    """
    Raised when a caller breaks a contract of the core.
    This is a programming or configuration error - it must not be swallowed.
    """

    pass


class MissingEntryError(PreconditionViolation):
    """Raised when synthesis is requested without a matched entry."""

    pass


class ConfigurationError(PreconditionViolation):
    """Raised when settings loaded from the environment are invalid."""

    pass


class UnknownActionModeError(PreconditionViolation):
    """Raised when the dispatcher receives an action mode it does not handle."""

    def __init__(self, mode):
        self.mode = mode
        super().__init__(f"Unknown action mode: {mode!r}")


# Approval state conflicts (rejected operation, tracker state unchanged)


class ApprovalStateConflict(FAQBotError):
    """Raised when an approval operation conflicts with the tracked state."""

    def __init__(self, answer_id: str, message: str):
        self.answer_id = answer_id
        super().__init__(message)


class ApprovalNotFoundError(ApprovalStateConflict):
    def __init__(self, answer_id: str):
        super().__init__(answer_id, f"No approval record found for answer {answer_id}")


class ApprovalAlreadyResolvedError(ApprovalStateConflict):
    def __init__(self, answer_id: str, state: str):
        self.state = state
        super().__init__(
            answer_id, f"Approval for answer {answer_id} already resolved ({state})"
        )


class DuplicateApprovalError(ApprovalStateConflict):
    def __init__(self, answer_id: str):
        super().__init__(
            answer_id, f"Approval for answer {answer_id} was already submitted"
        )


class InvalidDecisionError(ApprovalStateConflict):
    """Raised when a decision is malformed, e.g. an edit without text."""

    pass


# External capability failures (recoverable by the caller via retry)


class ExternalCapabilityError(FAQBotError):
    """
    Raised when a publish, notify or generation call fails.
    Retrying with the same answer id is safe: publishing is idempotent per answer.
    """

    def __init__(self, operation: str, message: str, answer_id: Optional[str] = None):
        self.operation = operation
        self.answer_id = answer_id
        prefix = f"{operation} failed"
        if answer_id:
            prefix += f" for answer {answer_id}"
        super().__init__(f"{prefix}: {message}")


# Knowledge base loading


class KnowledgeBaseError(FAQBotError):
    """Raised when the knowledge base cannot be read or is malformed."""

    pass
