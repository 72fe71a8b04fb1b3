from inkforge.models.card import (
    ANY_SHIFT_TARGET_ID,
    KNOWN_KEYWORDS,
    UNLIMITED_COPIES_ID,
    Card,
    Ink,
    Keywords,
    Legality,
    Requirements,
)
from inkforge.models.deck import (
    DECK_SIZE,
    MAX_SINGLETONS,
    Deck,
    GenerationResult,
    GenerationStatus,
)
from inkforge.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    EmptyInkPoolError,
    FailureDetail,
    FailureKind,
    IllegalPickError,
    KnownError,
    NoPickableCandidateError,
    OutcomeType,
    RetryBudgetExhaustedError,
    create_known_failure,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)

__all__ = [
    "ANY_SHIFT_TARGET_ID",
    "ApiResponse",
    "Card",
    "DECK_SIZE",
    "Deck",
    "EmptyInkPoolError",
    "FailureDetail",
    "FailureKind",
    "GenerationResult",
    "GenerationStatus",
    "IllegalPickError",
    "Ink",
    "KNOWN_KEYWORDS",
    "Keywords",
    "KnownError",
    "Legality",
    "MAX_SINGLETONS",
    "NoPickableCandidateError",
    "OutcomeType",
    "Requirements",
    "RetryBudgetExhaustedError",
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "UNLIMITED_COPIES_ID",
    "create_known_failure",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
]
