"""Pipeline components for email normalization and validation."""

from mailtidy.pipeline.distance import ClosestDomainResult, closest_domain, levenshtein, normalized_score
from mailtidy.pipeline.normalizer import (
    CHANGE_CODES,
    ChangeCode,
    EmailNormalizer,
    NormalizationObserver,
    NormalizationResult,
    StageTrace,
    change_code_to_reason,
    normalize_email,
    normalize_email_async,
)
from mailtidy.pipeline.stages import StageResult
from mailtidy.pipeline.suggestion import (
    AiSuggestion,
    EmbeddingSuggestionProvider,
    SuggestionAdapter,
    SuggestionProvider,
)
from mailtidy.pipeline.validator import (
    VALIDATION_CODES,
    DomainSuggestion,
    EmailValidator,
    ValidationCode,
    ValidationResult,
    is_valid,
    validate_email,
    validation_code_to_reason,
)

__all__ = [
    "AiSuggestion",
    "CHANGE_CODES",
    "ChangeCode",
    "ClosestDomainResult",
    "DomainSuggestion",
    "EmailNormalizer",
    "EmailValidator",
    "EmbeddingSuggestionProvider",
    "NormalizationObserver",
    "NormalizationResult",
    "StageResult",
    "StageTrace",
    "SuggestionAdapter",
    "SuggestionProvider",
    "VALIDATION_CODES",
    "ValidationCode",
    "ValidationResult",
    "change_code_to_reason",
    "closest_domain",
    "is_valid",
    "levenshtein",
    "normalize_email",
    "normalize_email_async",
    "normalized_score",
    "validate_email",
    "validation_code_to_reason",
]
