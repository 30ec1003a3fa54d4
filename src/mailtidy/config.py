"""Options and built-in defaults for email normalization.

Defaults (typo tables, blocklist, candidate domains) are read from
``data/defaults.yaml`` once and never mutated. Caller options are merged
with them by ``resolve_options``, which produces the single fully-resolved
``EmailOptions`` value the pipeline runs with:

- ``fix_domains`` / ``fix_tlds``: caller entries override default keys
- ``blocklist``: caller rules are added to the default rules
- ``fuzzy_matching.candidates``: appended to the built-in domain list
- ``ai.candidates``: replace the built-in list when given
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from mailtidy.exceptions import ConfigurationError

DEFAULTS_PATH = Path(__file__).parent / "data" / "defaults.yaml"

DEFAULT_MAX_DISTANCE = 2
DEFAULT_MIN_CONFIDENCE = 0.7
DEFAULT_AI_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
DEFAULT_AI_THRESHOLD = 0.82
DEFAULT_AI_MAX_EDITS = 2
DEFAULT_AI_TIMEOUT = 2.0

# camelCase spellings accepted in mappings, mapped to field names
_KEY_ALIASES = {
    "asciiOnly": "ascii_only",
    "fixDomains": "fix_domains",
    "fixTlds": "fix_tlds",
    "fuzzyMatching": "fuzzy_matching",
    "maxDistance": "max_distance",
    "minConfidence": "min_confidence",
    "findClosestOptions": "find_closest_options",
    "maxEdits": "max_edits",
    "normalise": "normalize",
}


@lru_cache(maxsize=1)
def _load_defaults() -> dict:
    """Load the built-in tables from YAML."""
    with open(DEFAULTS_PATH, encoding="utf-8") as f:
        return yaml.safe_load(f)


@lru_cache(maxsize=1)
def default_fix_domains() -> Mapping[str, str]:
    """Built-in exact domain typo corrections."""
    return MappingProxyType(_string_map(_load_defaults().get("fix_domains", {}), "fix_domains"))


@lru_cache(maxsize=1)
def default_fix_tlds() -> Mapping[str, str]:
    """Built-in TLD typo corrections, keys and values with a leading dot."""
    tlds = _string_map(_load_defaults().get("fix_tlds", {}), "fix_tlds")
    return MappingProxyType({_dotted(bad): _dotted(good) for bad, good in tlds.items()})


@lru_cache(maxsize=1)
def default_fuzzy_candidates() -> tuple[str, ...]:
    """Well-known domains offered as fuzzy suggestions."""
    return _string_tuple(_load_defaults().get("fuzzy_candidates", []), "fuzzy_candidates")


@lru_cache(maxsize=1)
def default_ai_candidates() -> tuple[str, ...]:
    """Domains compared by embedding-based suggestion providers."""
    return _string_tuple(_load_defaults().get("ai_candidates", []), "ai_candidates")


@lru_cache(maxsize=1)
def default_blocklist() -> "BlockConfig":
    """Built-in block rules."""
    return BlockConfig.from_mapping(_load_defaults().get("blocklist", {}))


@dataclass(frozen=True, slots=True)
class BlockRules:
    """Rules that block a domain.

    Attributes:
        exact: Domains blocked on equality.
        suffix: Dot-boundary suffixes (".local" blocks "x.local").
        wildcard: Patterns where ``*`` is one label and ``**`` one or more.
        tlds: Top-level domains, with a leading dot.
    """

    exact: tuple[str, ...] = ()
    suffix: tuple[str, ...] = ()
    wildcard: tuple[str, ...] = ()
    tlds: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class AllowRules:
    """Domains that are never blocked, whatever the block rules say."""

    exact: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class BlockConfig:
    """Block and allow rules. All values are stored lowercase."""

    block: BlockRules = field(default_factory=BlockRules)
    allow: AllowRules = field(default_factory=AllowRules)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "BlockConfig":
        """Build from ``{"block": {...}, "allow": {"exact": [...]}}``."""
        if data is None:
            return cls()
        data = _expect_mapping(data, "blocklist")
        _reject_unknown(data, {"block", "allow"}, "blocklist")

        block = _expect_mapping(data.get("block") or {}, "blocklist.block")
        _reject_unknown(block, {"exact", "suffix", "wildcard", "tlds"}, "blocklist.block")
        allow = _expect_mapping(data.get("allow") or {}, "blocklist.allow")
        _reject_unknown(allow, {"exact"}, "blocklist.allow")

        return cls(
            block=BlockRules(
                exact=_lowered(block.get("exact"), "blocklist.block.exact"),
                suffix=_lowered(block.get("suffix"), "blocklist.block.suffix"),
                wildcard=_lowered(block.get("wildcard"), "blocklist.block.wildcard"),
                tlds=tuple(_dotted(t) for t in _lowered(block.get("tlds"), "blocklist.block.tlds")),
            ),
            allow=AllowRules(exact=_lowered(allow.get("exact"), "blocklist.allow.exact")),
        )

    def merge(self, other: "BlockConfig") -> "BlockConfig":
        """Union of both rule sets, keeping first-seen order."""
        return BlockConfig(
            block=BlockRules(
                exact=_union(self.block.exact, other.block.exact),
                suffix=_union(self.block.suffix, other.block.suffix),
                wildcard=_union(self.block.wildcard, other.block.wildcard),
                tlds=_union(self.block.tlds, other.block.tlds),
            ),
            allow=AllowRules(exact=_union(self.allow.exact, other.allow.exact)),
        )


@dataclass(frozen=True, slots=True)
class FuzzyMatchingOptions:
    """Settings for "did you mean" suggestions by edit distance.

    Attributes:
        enabled: Whether the fuzzy check runs during validation.
        candidates: Extra candidate domains (built-ins are added on resolve).
        max_distance: Largest edit distance worth suggesting; None for no bound.
        min_confidence: Lowest normalized score worth suggesting.
        normalize: Trim and lowercase before comparing.
    """

    enabled: bool = False
    candidates: tuple[str, ...] = ()
    max_distance: int | None = DEFAULT_MAX_DISTANCE
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    normalize: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "FuzzyMatchingOptions":
        if data is None:
            return cls()
        data = _canonical_keys(_expect_mapping(data, "fuzzy_matching"))
        _reject_unknown(
            data,
            {"enabled", "candidates", "max_distance", "min_confidence", "find_closest_options"},
            "fuzzy_matching",
        )

        closest = _canonical_keys(
            _expect_mapping(data.get("find_closest_options") or {}, "fuzzy_matching.find_closest_options")
        )
        _reject_unknown(closest, {"normalize"}, "fuzzy_matching.find_closest_options")

        max_distance = data.get("max_distance", DEFAULT_MAX_DISTANCE)
        if max_distance is not None:
            max_distance = _expect_int(max_distance, "fuzzy_matching.max_distance")

        return cls(
            enabled=_expect_bool(data.get("enabled", False), "fuzzy_matching.enabled"),
            candidates=_lowered(data.get("candidates"), "fuzzy_matching.candidates"),
            max_distance=max_distance,
            min_confidence=_expect_unit(
                data.get("min_confidence", DEFAULT_MIN_CONFIDENCE), "fuzzy_matching.min_confidence"
            ),
            normalize=_expect_bool(closest.get("normalize", True), "fuzzy_matching.find_closest_options.normalize"),
        )


@dataclass(frozen=True, slots=True)
class AiOptions:
    """Settings for the external AI suggestion provider.

    Attributes:
        enabled: Whether the async paths consult the provider.
        model: Model identifier handed to the provider.
        candidates: Candidate domains; built-ins are used when empty.
        threshold: Lowest similarity the provider should accept.
        max_edits: Largest edit distance between input and suggestion.
        timeout: Seconds to wait for the provider before giving up.
    """

    enabled: bool = False
    model: str = DEFAULT_AI_MODEL
    candidates: tuple[str, ...] = ()
    threshold: float = DEFAULT_AI_THRESHOLD
    max_edits: int = DEFAULT_AI_MAX_EDITS
    timeout: float = DEFAULT_AI_TIMEOUT

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "AiOptions":
        if data is None:
            return cls()
        data = _canonical_keys(_expect_mapping(data, "ai"))
        _reject_unknown(data, {"enabled", "model", "candidates", "threshold", "max_edits", "timeout"}, "ai")

        model = data.get("model", DEFAULT_AI_MODEL)
        if not isinstance(model, str):
            raise ConfigurationError(message="Expected a string", key="ai.model")
        timeout = data.get("timeout", DEFAULT_AI_TIMEOUT)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigurationError(message="Expected a positive number", key="ai.timeout")

        return cls(
            enabled=_expect_bool(data.get("enabled", False), "ai.enabled"),
            model=model,
            candidates=_lowered(data.get("candidates"), "ai.candidates"),
            threshold=_expect_unit(data.get("threshold", DEFAULT_AI_THRESHOLD), "ai.threshold"),
            max_edits=_expect_int(data.get("max_edits", DEFAULT_AI_MAX_EDITS), "ai.max_edits"),
            timeout=float(timeout),
        )


@dataclass(frozen=True, slots=True)
class EmailOptions:
    """Options for normalization and validation.

    Attributes:
        ascii_only: Transliterate and require ASCII addresses.
        fix_domains: Exact domain typo corrections (typo -> fix).
        fix_tlds: TLD typo corrections (".con" -> ".com").
        blocklist: Block/allow rules; None means no caller rules.
        fuzzy_matching: Fuzzy suggestion settings.
        ai: External AI suggestion settings.
    """

    ascii_only: bool = True
    fix_domains: Mapping[str, str] = field(default_factory=dict)
    fix_tlds: Mapping[str, str] = field(default_factory=dict)
    blocklist: BlockConfig | None = None
    fuzzy_matching: FuzzyMatchingOptions = field(default_factory=FuzzyMatchingOptions)
    ai: AiOptions = field(default_factory=AiOptions)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "EmailOptions":
        """Build options from a plain mapping (snake_case or camelCase keys).

        Raises:
            ConfigurationError: On unknown keys or wrongly typed values.
        """
        if data is None:
            return cls()
        data = _canonical_keys(_expect_mapping(data, "options"))
        _reject_unknown(
            data,
            {"ascii_only", "fix_domains", "fix_tlds", "blocklist", "fuzzy_matching", "ai"},
            "options",
        )

        blocklist = data.get("blocklist")
        return cls(
            ascii_only=_expect_bool(data.get("ascii_only", True), "ascii_only"),
            fix_domains=_lowered_map(data.get("fix_domains"), "fix_domains"),
            fix_tlds={
                _dotted(bad): _dotted(good)
                for bad, good in _lowered_map(data.get("fix_tlds"), "fix_tlds").items()
            },
            blocklist=BlockConfig.from_mapping(blocklist) if blocklist is not None else None,
            fuzzy_matching=FuzzyMatchingOptions.from_mapping(data.get("fuzzy_matching")),
            ai=AiOptions.from_mapping(data.get("ai")),
        )


OptionsLike = EmailOptions | Mapping[str, Any] | None


def resolve_options(options: OptionsLike = None, *, include_defaults: bool = True) -> EmailOptions:
    """Merge caller options with the built-in defaults.

    Pure: neither the defaults nor ``options`` are modified. Resolving an
    already-resolved value gives an equal value.

    Args:
        options: Caller options, a mapping of them, or None.
        include_defaults: If False, only the caller's tables and rules apply.

    Returns:
        Fully-resolved EmailOptions.

    Raises:
        ConfigurationError: If a mapping cannot be converted.
    """
    if options is None:
        options = EmailOptions()
    elif not isinstance(options, EmailOptions):
        options = EmailOptions.from_mapping(options)

    caller_domains = _lowered_map(options.fix_domains, "fix_domains")
    caller_tlds = {
        _dotted(bad): _dotted(good) for bad, good in _lowered_map(options.fix_tlds, "fix_tlds").items()
    }
    caller_blocklist = options.blocklist or BlockConfig()

    if not include_defaults:
        return replace(
            options,
            fix_domains=MappingProxyType(caller_domains),
            fix_tlds=MappingProxyType(caller_tlds),
            blocklist=caller_blocklist,
        )

    fuzzy = options.fuzzy_matching
    ai = options.ai
    return replace(
        options,
        fix_domains=MappingProxyType({**default_fix_domains(), **caller_domains}),
        fix_tlds=MappingProxyType({**default_fix_tlds(), **caller_tlds}),
        blocklist=default_blocklist().merge(caller_blocklist),
        fuzzy_matching=replace(fuzzy, candidates=_union(default_fuzzy_candidates(), fuzzy.candidates)),
        ai=replace(ai, candidates=ai.candidates or default_ai_candidates()),
    )


def load_options(path: Path | str) -> EmailOptions:
    """Read options from a YAML file.

    The file holds the same keys ``EmailOptions.from_mapping`` accepts.
    An empty file gives default options.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigurationError(message=f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(message=f"Invalid YAML in {path}: {exc}") from exc

    return EmailOptions.from_mapping(data or {})


def _dotted(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _union(first: Iterable[str], second: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys([*first, *second]))


def _canonical_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {_KEY_ALIASES.get(key, key): value for key, value in data.items()}


def _reject_unknown(data: Mapping[str, Any], known: set[str], where: str) -> None:
    for key in data:
        if key not in known:
            raise ConfigurationError(message="Unknown option", key=f"{where}.{key}")


def _expect_mapping(value: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(message="Expected a mapping", key=key)
    return value


def _expect_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(message="Expected true or false", key=key)
    return value


def _expect_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(message="Expected a non-negative integer", key=key)
    return value


def _expect_unit(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
        raise ConfigurationError(message="Expected a number between 0 and 1", key=key)
    return float(value)


def _string_tuple(value: Any, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    # A bare string is iterable but almost certainly a mistake
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise ConfigurationError(message="Expected a list of strings", key=key)
    items = tuple(value)
    if not all(isinstance(item, str) for item in items):
        raise ConfigurationError(message="Expected a list of strings", key=key)
    return items


def _lowered(value: Any, key: str) -> tuple[str, ...]:
    return tuple(item.strip().lower() for item in _string_tuple(value, key) if item.strip())


def _string_map(value: Any, key: str) -> dict[str, str]:
    if value is None:
        return {}
    mapping = _expect_mapping(value, key)
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in mapping.items()):
        raise ConfigurationError(message="Expected a mapping of strings to strings", key=key)
    return dict(mapping)


def _lowered_map(value: Any, key: str) -> dict[str, str]:
    return {k.strip().lower(): v.strip().lower() for k, v in _string_map(value, key).items()}
