"""Normalization pipeline: repair an address, then validate it.

Runs the transform stages in order, records a change code for each stage
that altered the address, short-circuits on the blocklist, and defers the
final verdict to the validation engine.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from functools import partial
from typing import Literal, Protocol

from mailtidy.config import EmailOptions, OptionsLike
from mailtidy.patterns.blocklist import domain_of
from mailtidy.patterns.shape import is_empty
from mailtidy.pipeline.stages import (
    StageResult,
    deobfuscate,
    fix_typos,
    lowercase,
    normalize_unicode_symbols,
    strip_display_name_and_comments,
    tidy_punctuation,
    to_ascii,
    trim,
)
from mailtidy.pipeline.suggestion import AiSuggestion, SuggestionProvider
from mailtidy.pipeline.validator import (
    EmailValidator,
    ValidationResult,
    is_valid,
    validation_code_to_reason,
)

logger = logging.getLogger(__name__)

ChangeCode = Literal[
    "trim",
    "lowercase",
    "stripped_display_name_and_comments",
    "deobfuscated_at_and_dot",
    "normalised_unicode_symbols",
    "tidied_punctuation_and_spacing",
    "fixed_domain_and_tld_typos",
    "converted_to_ascii",
    "blocked_by_list",
    "invalid_email_shape",
    "empty",
]

CHANGE_CODES: tuple[ChangeCode, ...] = (
    "trim",
    "lowercase",
    "stripped_display_name_and_comments",
    "deobfuscated_at_and_dot",
    "normalised_unicode_symbols",
    "tidied_punctuation_and_spacing",
    "fixed_domain_and_tld_typos",
    "converted_to_ascii",
    "blocked_by_list",
    "invalid_email_shape",
    "empty",
)

_REASONS: dict[ChangeCode, str] = {
    "trim": "Removed surrounding whitespace.",
    "lowercase": "Converted to lowercase.",
    "stripped_display_name_and_comments": "Removed display name or comments.",
    "deobfuscated_at_and_dot": 'Fixed obfuscated "at" or "dot" substitutions.',
    "normalised_unicode_symbols": "Replaced unicode symbols.",
    "tidied_punctuation_and_spacing": "Tidied punctuation and spacing.",
    "fixed_domain_and_tld_typos": "Corrected common domain or TLD typos.",
    "converted_to_ascii": "Converted non-ASCII characters to ASCII.",
    "blocked_by_list": "Email is blocked.",
    "invalid_email_shape": "Invalid email format.",
    "empty": "Email is empty.",
}


def change_code_to_reason(code: ChangeCode) -> str:
    """Return the fixed description of a change code."""
    return _REASONS[code]


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    """Result of normalizing one address.

    Attributes:
        final_email: Repaired address, or None if the input was empty or
            could not be made into an address.
        valid: Overall verdict.
        changes: Human-readable description of each change, in order.
        change_codes: Machine-readable codes parallel to ``changes``.
        validations: Results of the validation checks.
        ai_suggestion: Suggestion from the AI provider (async path only).
    """

    final_email: str | None
    valid: bool
    changes: tuple[str, ...]
    change_codes: tuple[ChangeCode, ...]
    validations: tuple[ValidationResult, ...] = ()
    ai_suggestion: AiSuggestion | None = None


@dataclass(frozen=True, slots=True)
class StageTrace:
    """One stage's output, for debugging.

    Attributes:
        name: Stage function name.
        out: Address after the stage.
        changed: Whether the stage altered the address.
    """

    name: str
    out: str
    changed: bool


class NormalizationObserver(Protocol):
    """Receives every result an EmailNormalizer produces."""

    def on_normalized(self, result: NormalizationResult) -> None: ...


@dataclass(frozen=True, slots=True)
class _Stage:
    name: str
    code: ChangeCode
    run: Callable[[str], StageResult]


def _result(
    final_email: str | None,
    valid: bool,
    codes: Iterable[ChangeCode],
    validations: tuple[ValidationResult, ...] = (),
) -> NormalizationResult:
    codes = tuple(codes)
    return NormalizationResult(
        final_email=final_email,
        valid=valid,
        changes=tuple(_REASONS[code] for code in codes),
        change_codes=codes,
        validations=validations,
    )


class EmailNormalizer:
    """Repairs and validates user-typed email addresses.

    Example:
        normalizer = EmailNormalizer()

        result = normalizer.normalize(" JANE.DOE @ gmai .com ")
        result.final_email   # "jane.doe@gmail.com"
        result.change_codes  # ("trim", "lowercase", ...)

        # With an AI suggestion provider
        normalizer = EmailNormalizer({"ai": {"enabled": True}}, suggestion_provider=provider)
        result = await normalizer.normalize_async("jane@gmial.co")
    """

    def __init__(
        self,
        options: OptionsLike = None,
        *,
        observers: Iterable[NormalizationObserver] = (),
        suggestion_provider: SuggestionProvider | None = None,
    ) -> None:
        """Initialize the normalizer.

        Args:
            options: Options or a mapping of them; merged with the defaults.
            observers: Notified of every result.
            suggestion_provider: Provider for ``normalize_async``.

        Raises:
            ConfigurationError: If ``options`` is malformed.
        """
        self._validator = EmailValidator(options, suggestion_provider=suggestion_provider)
        self._observers: list[NormalizationObserver] = list(observers)

        resolved = self._validator.options
        fix = _Stage(
            "fix_typos",
            "fixed_domain_and_tld_typos",
            partial(fix_typos, domains=resolved.fix_domains, tlds=resolved.fix_tlds),
        )
        stages = [
            _Stage("trim", "trim", trim),
            _Stage("lowercase", "lowercase", lowercase),
            _Stage(
                "strip_display_name_and_comments",
                "stripped_display_name_and_comments",
                strip_display_name_and_comments,
            ),
            _Stage("deobfuscate", "deobfuscated_at_and_dot", deobfuscate),
            _Stage("normalize_unicode_symbols", "normalised_unicode_symbols", normalize_unicode_symbols),
            _Stage("tidy_punctuation", "tidied_punctuation_and_spacing", tidy_punctuation),
            fix,
        ]
        if resolved.ascii_only:
            # Folding can uncover a typo ("gmaí.com" -> "gmai.com"), so fix again
            stages += [_Stage("to_ascii", "converted_to_ascii", to_ascii), fix]
        self._stages = tuple(stages)

    @property
    def options(self) -> EmailOptions:
        """Resolved options in use."""
        return self._validator.options

    @property
    def validator(self) -> EmailValidator:
        """The validation engine the verdict comes from."""
        return self._validator

    def add_observer(self, observer: NormalizationObserver) -> None:
        """Register an observer for subsequent results."""
        self._observers.append(observer)

    def normalize(self, raw: str | None) -> NormalizationResult:
        """Repair and validate an address.

        Never raises for bad input; problems are reported in the result.

        Args:
            raw: Address as the user typed it.

        Returns:
            NormalizationResult with the repaired address and verdict.
        """
        result = self._run(raw)
        self._notify(result)
        return result

    async def normalize_async(self, raw: str | None) -> NormalizationResult:
        """Like ``normalize``, also consulting the AI suggestion provider.

        The provider is only asked about well-formed, unblocked addresses
        that did not already get a fuzzy suggestion.
        """
        result = self._run(raw)

        if result.final_email is not None and "blocked_by_list" not in result.change_codes:
            validations, hit = await self._validator.validate_with_ai(result.final_email)
            if hit is not None:
                result = replace(
                    result,
                    valid=is_valid(validations),
                    validations=validations,
                    ai_suggestion=hit,
                )

        self._notify(result)
        return result

    def trace(self, raw: str) -> tuple[StageTrace, ...]:
        """Run the stages only, returning each stage's output."""
        traces: list[StageTrace] = []
        current = raw
        for stage in self._stages:
            step = stage.run(current)
            traces.append(StageTrace(name=stage.name, out=step.out, changed=step.changed))
            current = step.out
        return tuple(traces)

    def _run(self, raw: str | None) -> NormalizationResult:
        if raw is None or is_empty(raw):
            return _result(None, False, ("empty",))

        codes: list[ChangeCode] = []
        current = raw
        for stage in self._stages:
            step = stage.run(current)
            if step.changed and stage.code not in codes:
                codes.append(stage.code)
            current = step.out

        if not current:
            codes.append("empty")
            return _result(None, False, codes)

        if "@" in current and self._validator.blocklist.is_blocked(domain_of(current)):
            codes.append("blocked_by_list")
            blocked = ValidationResult(
                is_valid=False,
                code="BLOCKLISTED",
                message=validation_code_to_reason("BLOCKLISTED"),
            )
            return _result(current, False, codes, (blocked,))

        validations = self._validator.validate(current)
        first = validations[0].code
        if first == "INVALID_FORMAT":
            codes.append("invalid_email_shape")
            return _result(None, False, codes, validations)
        if first == "EMPTY":
            codes.append("empty")
            return _result(None, False, codes, validations)

        return _result(current, is_valid(validations), codes, validations)

    def _notify(self, result: NormalizationResult) -> None:
        for observer in self._observers:
            try:
                observer.on_normalized(result)
            except Exception:
                logger.exception("Observer %r failed", observer)


def normalize_email(raw: str | None, options: OptionsLike = None) -> NormalizationResult:
    """Normalize an address with a one-off EmailNormalizer.

    Args:
        raw: Address as the user typed it.
        options: Options or a mapping of them.

    Returns:
        NormalizationResult, see ``EmailNormalizer.normalize``.
    """
    return EmailNormalizer(options).normalize(raw)


async def normalize_email_async(
    raw: str | None,
    options: OptionsLike = None,
    *,
    suggestion_provider: SuggestionProvider | None = None,
) -> NormalizationResult:
    """Async variant of ``normalize_email`` with an optional AI provider."""
    return await EmailNormalizer(options, suggestion_provider=suggestion_provider).normalize_async(raw)
