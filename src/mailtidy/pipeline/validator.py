"""Validation engine for (normalized) email addresses.

Checks run in this order; the first two are terminal:

1. empty / shape        -> EMPTY, INVALID_FORMAT
2. domain typo table    -> INVALID_DOMAIN
3. TLD typo table       -> INVALID_TLD
4. blocklist            -> BLOCKLISTED
5. ASCII-only           -> NON_ASCII_CHARACTERS
6. fuzzy "did you mean" -> DOMAIN_SUGGESTION (advisory)
7. AI suggestion        -> DOMAIN_SUGGESTION (advisory, async only)

Advisory results have ``is_valid=True`` and never fail an address.
"""

import logging
from dataclasses import dataclass
from typing import Literal

from mailtidy.config import EmailOptions, OptionsLike, resolve_options
from mailtidy.patterns.blocklist import BlocklistMatcher, domain_of
from mailtidy.patterns.shape import is_empty, looks_like_email
from mailtidy.pipeline.distance import closest_domain
from mailtidy.pipeline.suggestion import AiSuggestion, SuggestionAdapter, SuggestionProvider

logger = logging.getLogger(__name__)

ValidationCode = Literal[
    "VALID",
    "EMPTY",
    "INVALID_FORMAT",
    "INVALID_DOMAIN",
    "INVALID_TLD",
    "BLOCKLISTED",
    "NON_ASCII_CHARACTERS",
    "DOMAIN_SUGGESTION",
]

VALIDATION_CODES: tuple[ValidationCode, ...] = (
    "VALID",
    "EMPTY",
    "INVALID_FORMAT",
    "INVALID_DOMAIN",
    "INVALID_TLD",
    "BLOCKLISTED",
    "NON_ASCII_CHARACTERS",
    "DOMAIN_SUGGESTION",
)

_REASONS: dict[ValidationCode, str] = {
    "VALID": "Email is valid.",
    "EMPTY": "Email is empty.",
    "INVALID_FORMAT": "Email is not in a valid format.",
    "INVALID_DOMAIN": "Email domain is invalid.",
    "INVALID_TLD": "Email top-level domain (TLD) is invalid.",
    "BLOCKLISTED": "Email domain is blocklisted.",
    "NON_ASCII_CHARACTERS": "Email contains non-ASCII characters.",
    "DOMAIN_SUGGESTION": "A similar, more common domain exists.",
}


@dataclass(frozen=True, slots=True)
class DomainSuggestion:
    """A suggested replacement for the address's domain.

    Attributes:
        original_domain: Domain as validated.
        suggested_domain: Domain the user probably meant.
        confidence: Similarity in [0, 1].
    """

    original_domain: str
    suggested_domain: str
    confidence: float


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of one validation check.

    Attributes:
        is_valid: False only for failed checks; advisories are True.
        code: Machine-readable result code.
        message: Human-readable message.
        suggestion: Suggested domain for DOMAIN_SUGGESTION results.
    """

    is_valid: bool
    code: ValidationCode
    message: str
    suggestion: DomainSuggestion | None = None


def validation_code_to_reason(code: ValidationCode) -> str:
    """Return the fixed description of a validation code."""
    return _REASONS[code]


def is_valid(results: tuple[ValidationResult, ...]) -> bool:
    """Overall verdict: True when no check failed."""
    return all(result.is_valid for result in results)


def _failure(code: ValidationCode) -> ValidationResult:
    return ValidationResult(is_valid=False, code=code, message=_REASONS[code])


def _suggestion(email: str, domain: str, suggested: str, confidence: float) -> ValidationResult:
    local = email[: len(email) - len(domain) - 1]
    return ValidationResult(
        is_valid=True,
        code="DOMAIN_SUGGESTION",
        message=f"Did you mean: {local}@{suggested}?",
        suggestion=DomainSuggestion(
            original_domain=domain,
            suggested_domain=suggested,
            confidence=confidence,
        ),
    )


class EmailValidator:
    """Validates addresses against shape rules, typo tables, the blocklist and options.

    Example:
        validator = EmailValidator({"fuzzy_matching": {"enabled": True}})

        results = validator.validate("jane@gmal.com")
        # (VALID, DOMAIN_SUGGESTION "Did you mean: jane@gmail.com?")
    """

    def __init__(
        self,
        options: OptionsLike = None,
        *,
        suggestion_provider: SuggestionProvider | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            options: Options or a mapping of them; merged with the defaults.
            suggestion_provider: Provider for the AI check. Without one the
                AI check is skipped even when ``ai.enabled`` is set.

        Raises:
            ConfigurationError: If ``options`` is malformed.
        """
        self._options = resolve_options(options)
        self._matcher = BlocklistMatcher(self._options.blocklist)
        self._adapter = (
            SuggestionAdapter(suggestion_provider, self._options.ai, self._matcher)
            if suggestion_provider is not None
            else None
        )

    @property
    def options(self) -> EmailOptions:
        """Resolved options in use."""
        return self._options

    @property
    def blocklist(self) -> BlocklistMatcher:
        """Compiled blocklist in use."""
        return self._matcher

    def validate(self, email: str | None) -> tuple[ValidationResult, ...]:
        """Run the synchronous checks.

        Args:
            email: Address to check, usually already normalized.

        Returns:
            Failed checks and advisories, in check order. An address that
            fails nothing gets a leading VALID result.
        """
        if email is None or is_empty(email):
            return (_failure("EMPTY"),)
        if not looks_like_email(email):
            return (_failure("INVALID_FORMAT"),)

        domain = domain_of(email)
        failures: list[ValidationResult] = []

        # Known typos; the normalizer repairs these before validating
        lowered = domain.lower()
        if lowered in self._options.fix_domains:
            failures.append(_failure("INVALID_DOMAIN"))
        if any(len(lowered) > len(bad) and lowered.endswith(bad) for bad in self._options.fix_tlds):
            failures.append(_failure("INVALID_TLD"))

        if self._matcher.is_blocked(domain):
            failures.append(_failure("BLOCKLISTED"))

        if self._options.ascii_only and not email.isascii():
            failures.append(_failure("NON_ASCII_CHARACTERS"))

        advisories: list[ValidationResult] = []
        fuzzy = self._fuzzy_suggestion(email, domain)
        if fuzzy is not None:
            advisories.append(fuzzy)

        if failures:
            return (*failures, *advisories)
        return (ValidationResult(is_valid=True, code="VALID", message=_REASONS["VALID"]), *advisories)

    async def validate_async(self, email: str | None) -> tuple[ValidationResult, ...]:
        """Run the synchronous checks, then the AI check.

        The AI check only runs for well-formed addresses without a fuzzy
        suggestion. A slow or failing provider leaves the result unchanged.
        """
        results, _ = await self.validate_with_ai(email)
        return results

    async def validate_with_ai(
        self, email: str | None
    ) -> tuple[tuple[ValidationResult, ...], AiSuggestion | None]:
        """Like ``validate_async``, also returning the raw AI suggestion."""
        results = self.validate(email)
        if email is None or results[0].code in ("EMPTY", "INVALID_FORMAT"):
            return results, None
        if any(result.code == "DOMAIN_SUGGESTION" for result in results):
            return results, None

        hit = await self.suggest_with_ai(email)
        if hit is None:
            return results, None

        domain = domain_of(email)
        return (*results, _suggestion(email, domain, hit.suggestion, hit.confidence)), hit

    async def suggest_with_ai(self, email: str) -> AiSuggestion | None:
        """Ask the AI provider about the address's domain.

        Returns:
            The provider's suggestion, or None when AI suggestions are
            disabled, no provider is configured, or the provider has none.
        """
        if not self._options.ai.enabled:
            return None
        if self._adapter is None:
            logger.debug("AI suggestions enabled but no provider configured")
            return None

        return await self._adapter.suggest(domain_of(email))

    def _fuzzy_suggestion(self, email: str, domain: str) -> ValidationResult | None:
        fuzzy = self._options.fuzzy_matching
        if not fuzzy.enabled:
            return None

        match = closest_domain(
            domain,
            fuzzy.candidates,
            max_distance=fuzzy.max_distance,
            normalize=fuzzy.normalize,
        )
        if match.candidate is None or match.distance == 0:
            return None
        if fuzzy.max_distance is not None and match.distance > fuzzy.max_distance:
            return None
        if match.normalized_score < fuzzy.min_confidence:
            return None
        if match.candidate == domain.strip().lower():
            return None
        if self._matcher.is_blocked(match.candidate):
            return None

        logger.debug(
            "Suggesting %s for %s (distance %d, score %.2f)",
            match.candidate,
            domain,
            match.distance,
            match.normalized_score,
        )
        return _suggestion(email, domain, match.candidate, match.normalized_score)


def validate_email(email: str | None, options: OptionsLike = None) -> tuple[ValidationResult, ...]:
    """Validate an address with a one-off EmailValidator.

    Args:
        email: Address to check.
        options: Options or a mapping of them.

    Returns:
        Validation results, see ``EmailValidator.validate``.
    """
    return EmailValidator(options).validate(email)
