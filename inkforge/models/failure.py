"""
Failure explanation envelope and outcome classification.

Every outcome of deck generation that leaves the library is classified:

- Success: a legal deck was built
- KnownFailure: the system knows why it could not build one
- UnknownFailure: something unexpected happened

Deck generation failures are local and recoverable by the caller (retry with
other inks or a larger retry budget), so each one has its own exception type
carrying a FailureKind. The HTTP layer converts them into ApiResponse
envelopes through `finalize_response()`.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, PrivateAttr


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    EMPTY_INK_POOL = "empty_ink_pool"

    # Generation failures
    NO_PICKABLE_CANDIDATE = "no_pickable_candidate"
    RETRY_BUDGET_EXHAUSTED = "retry_budget_exhausted"
    VALIDATION_FAILED = "validation_failed"

    # Service failures
    SERVICE_UNAVAILABLE = "service_unavailable"
    EXTERNAL_API_ERROR = "external_api_error"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Universal response envelope for all API endpoints.

    Every response is classified into one of the outcome types,
    ensuring no failure reaches the user unexplained.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    # Set by finalize_response()
    _finalized: bool = PrivateAttr(default=False)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        Example: no cards for the requested inks, retry budget exhausted.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class EmptyInkPoolError(KnownError):
    """
    No catalog card matches the requested inks.

    Generation reports this as an empty deck; `raise_for_status()` on the
    result turns it into this exception.
    """

    def __init__(self, inks: tuple[str, ...]):
        self.inks = inks
        super().__init__(
            kind=FailureKind.EMPTY_INK_POOL,
            message=f"No legal cards found for inks: {', '.join(inks)}.",
            suggestion="Pick different inks or refresh the card catalog.",
            status_code=404,
        )


class NoPickableCandidateError(KnownError):
    """
    Every candidate of a sampling round has weight <= 0.

    Typically every legal card at the remaining costs is already at its
    copy cap.
    """

    def __init__(self, cost_buckets: tuple[int, ...], deck_size: int):
        self.cost_buckets = cost_buckets
        self.deck_size = deck_size
        super().__init__(
            kind=FailureKind.NO_PICKABLE_CANDIDATE,
            message="No card can be added to the deck.",
            detail=(
                f"All candidates in cost buckets {list(cost_buckets)} have zero weight "
                f"with {deck_size} cards in the deck."
            ),
            suggestion="Add a second ink or start from a smaller partial deck.",
        )


class RetryBudgetExhaustedError(KnownError):
    """
    The repair loop used up its attempts without reaching a full legal deck.

    The best-effort deck is kept on the generation result.
    """

    def __init__(self, attempts: int, deck_size: int, target_size: int):
        self.attempts = attempts
        self.deck_size = deck_size
        self.target_size = target_size
        super().__init__(
            kind=FailureKind.RETRY_BUDGET_EXHAUSTED,
            message=f"Unable to build a legal {target_size}-card deck.",
            detail=f"Best effort after {attempts} attempts has {deck_size} cards.",
            suggestion="Retry with a larger retry budget or different inks.",
        )


class IllegalPickError(KnownError):
    """A next-card provider returned a card that may not be added."""

    def __init__(self, card_title: str, reason: str):
        self.card_title = card_title
        self.reason = reason
        super().__init__(
            kind=FailureKind.VALIDATION_FAILED,
            message=f"Generator picked an illegal card: {card_title}.",
            detail=reason,
        )


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================
#
# All user-visible responses MUST pass through this boundary.
#
# =============================================================================


STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.UNKNOWN_FAILURE: (
        "I failed and I don't know why. Try simplifying the request or retrying."
    ),
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Every response that passes through this function is guaranteed to:
    1. Have a valid outcome classification
    2. Have failure details if not successful

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    response._finalized = True

    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """Check if a response has passed through the authority boundary."""
    return response._finalized


def create_unknown_failure(
    exception: Exception,
    include_type: bool = True,
) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed and cannot be customized.
    """
    detail = None
    if include_type:
        detail = f"{type(exception).__name__}"

    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
            detail=detail,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
        ),
    )

    return finalize_response(response)


def create_known_failure(error: KnownError) -> ApiResponse[Any]:
    """Create a finalized known failure response from a KnownError."""
    return finalize_response(error.to_response())


def create_success(data: T) -> ApiResponse[T]:
    """Create a finalized success response."""
    response = ApiResponse[T](outcome=OutcomeType.SUCCESS, data=data)
    return finalize_response(response)
