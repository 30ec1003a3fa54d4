"""mailtidy - Repair and validate user-typed email addresses."""

from mailtidy.config import (
    AiOptions,
    AllowRules,
    BlockConfig,
    BlockRules,
    EmailOptions,
    FuzzyMatchingOptions,
    load_options,
    resolve_options,
)
from mailtidy.exceptions import ConfigurationError, MailtidyError, SuggestionUnavailableError
from mailtidy.patterns import BlocklistMatcher, is_blocked, looks_like_email
from mailtidy.pipeline import (
    CHANGE_CODES,
    VALIDATION_CODES,
    AiSuggestion,
    ChangeCode,
    ClosestDomainResult,
    DomainSuggestion,
    EmailNormalizer,
    EmailValidator,
    EmbeddingSuggestionProvider,
    NormalizationObserver,
    NormalizationResult,
    StageTrace,
    SuggestionAdapter,
    SuggestionProvider,
    ValidationCode,
    ValidationResult,
    change_code_to_reason,
    closest_domain,
    levenshtein,
    normalize_email,
    normalize_email_async,
    validate_email,
    validation_code_to_reason,
)

__version__ = "0.1.0"

__all__ = [
    "AiOptions",
    "AiSuggestion",
    "AllowRules",
    "BlockConfig",
    "BlockRules",
    "BlocklistMatcher",
    "CHANGE_CODES",
    "ChangeCode",
    "ClosestDomainResult",
    "ConfigurationError",
    "DomainSuggestion",
    "EmailNormalizer",
    "EmailOptions",
    "EmailValidator",
    "EmbeddingSuggestionProvider",
    "FuzzyMatchingOptions",
    "MailtidyError",
    "NormalizationObserver",
    "NormalizationResult",
    "StageTrace",
    "SuggestionAdapter",
    "SuggestionProvider",
    "SuggestionUnavailableError",
    "VALIDATION_CODES",
    "ValidationCode",
    "ValidationResult",
    "change_code_to_reason",
    "closest_domain",
    "is_blocked",
    "levenshtein",
    "load_options",
    "looks_like_email",
    "normalize_email",
    "normalize_email_async",
    "resolve_options",
    "validate_email",
    "validation_code_to_reason",
]
