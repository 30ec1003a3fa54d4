"""Tests for options parsing and resolution."""

from pathlib import Path

import pytest

from mailtidy import ConfigurationError, EmailOptions, load_options, resolve_options
from mailtidy.config import (
    AiOptions,
    BlockConfig,
    FuzzyMatchingOptions,
    default_blocklist,
    default_fix_domains,
    default_fix_tlds,
    default_fuzzy_candidates,
)


class TestFromMapping:
    """Tests for building options from plain mappings."""

    def test_defaults(self) -> None:
        """An empty mapping gives default options."""
        options = EmailOptions.from_mapping({})

        assert options.ascii_only is True
        assert options.fuzzy_matching == FuzzyMatchingOptions()
        assert options.ai == AiOptions()
        assert options.blocklist is None

    def test_camel_case_keys(self) -> None:
        """camelCase keys are accepted."""
        options = EmailOptions.from_mapping(
            {
                "asciiOnly": False,
                "fixDomains": {"Gmal.com": "Gmail.com"},
                "fuzzyMatching": {
                    "enabled": True,
                    "maxDistance": 1,
                    "minConfidence": 0.8,
                    "findClosestOptions": {"normalize": False},
                },
                "ai": {"enabled": True, "maxEdits": 1},
            }
        )

        assert options.ascii_only is False
        assert options.fix_domains == {"gmal.com": "gmail.com"}
        assert options.fuzzy_matching.max_distance == 1
        assert options.fuzzy_matching.min_confidence == 0.8
        assert options.fuzzy_matching.normalize is False
        assert options.ai.max_edits == 1

    def test_tld_keys_dotted(self) -> None:
        """TLD keys and values gain a leading dot."""
        options = EmailOptions.from_mapping({"fix_tlds": {"cmo": "com", ".ogr": ".org"}})

        assert options.fix_tlds == {".cmo": ".com", ".ogr": ".org"}

    def test_unknown_key(self) -> None:
        """Unknown keys are rejected with their location."""
        with pytest.raises(ConfigurationError) as exc_info:
            EmailOptions.from_mapping({"fuzzy_matching": {"enabld": True}})

        assert exc_info.value.key == "fuzzy_matching.enabld"
        assert "fuzzy_matching.enabld" in str(exc_info.value)

    def test_wrong_types(self) -> None:
        """Wrongly typed values are rejected."""
        bad = [
            {"ascii_only": "yes"},
            {"fix_domains": ["gmal.com"]},
            {"blocklist": {"block": {"exact": "spam.com"}}},
            {"fuzzy_matching": {"max_distance": -1}},
            {"fuzzy_matching": {"min_confidence": 1.5}},
            {"ai": {"timeout": 0}},
            {"ai": {"threshold": True}},
        ]
        for data in bad:
            with pytest.raises(ConfigurationError):
                EmailOptions.from_mapping(data)

    def test_unbounded_distance(self) -> None:
        """max_distance may be null."""
        assert FuzzyMatchingOptions.from_mapping({"max_distance": None}).max_distance is None


class TestDefaultTables:
    """Tests for the built-in data tables."""

    def test_tld_table_loads(self) -> None:
        """Every TLD key loads as a dotted string, including YAML-special ones."""
        tlds = default_fix_tlds()

        assert tlds[".inf"] == ".info"
        assert tlds[".c0m"] == ".com"
        assert all(isinstance(k, str) and k.startswith(".") for k in tlds)
        assert all(isinstance(v, str) and v.startswith(".") for v in tlds.values())

    def test_default_options_resolve(self) -> None:
        """Resolving with defaults succeeds and carries the full TLD table."""
        assert dict(resolve_options().fix_tlds) == dict(default_fix_tlds())


class TestResolveOptions:
    """Tests for merging caller options with defaults."""

    def test_default_tables(self) -> None:
        """Resolved options carry the built-in tables."""
        options = resolve_options()

        assert options.fix_domains["gmai.com"] == "gmail.com"
        assert options.fix_tlds[".con"] == ".com"
        assert options.blocklist == default_blocklist()

    def test_caller_overrides_default_key(self) -> None:
        """Caller typo entries override the defaults."""
        options = resolve_options({"fix_domains": {"gmai.com": "gmx.com"}})

        assert options.fix_domains["gmai.com"] == "gmx.com"
        assert options.fix_domains["gamil.com"] == "gmail.com"

    def test_defaults_not_mutated(self) -> None:
        """Resolving never changes the built-in tables."""
        resolve_options({"fix_domains": {"gmai.com": "gmx.com", "new.com": "old.com"}})

        assert default_fix_domains()["gmai.com"] == "gmail.com"
        assert "new.com" not in default_fix_domains()

    def test_blocklist_union(self) -> None:
        """Caller block rules are added to the defaults."""
        options = resolve_options({"blocklist": {"block": {"exact": ["spam.com"]}}})

        assert options.blocklist is not None
        assert "spam.com" in options.blocklist.block.exact
        assert "mailinator.com" in options.blocklist.block.exact

    def test_fuzzy_candidates_appended(self) -> None:
        """Caller candidates follow the built-ins, without duplicates."""
        options = resolve_options({"fuzzy_matching": {"candidates": ["gmail.com", "company.io"]}})
        candidates = options.fuzzy_matching.candidates

        assert candidates[: len(default_fuzzy_candidates())] == default_fuzzy_candidates()
        assert candidates[-1] == "company.io"
        assert candidates.count("gmail.com") == 1

    def test_ai_candidates_replace(self) -> None:
        """Caller AI candidates replace the built-in list."""
        options = resolve_options({"ai": {"candidates": ["company.io"]}})

        assert options.ai.candidates == ("company.io",)

    def test_without_defaults(self) -> None:
        """include_defaults=False keeps only the caller's rules."""
        options = resolve_options({"fix_domains": {"a.com": "b.com"}}, include_defaults=False)

        assert dict(options.fix_domains) == {"a.com": "b.com"}
        assert options.blocklist == BlockConfig()

    def test_resolve_is_stable(self) -> None:
        """Resolving resolved options changes nothing."""
        options = resolve_options({"blocklist": {"block": {"exact": ["spam.com"]}}})

        assert resolve_options(options) == options

    def test_accepts_dataclass(self) -> None:
        """EmailOptions instances are accepted directly."""
        options = resolve_options(EmailOptions(ascii_only=False))

        assert options.ascii_only is False


class TestLoadOptions:
    """Tests for YAML config files."""

    def test_load(self, tmp_path: Path) -> None:
        """A YAML file is parsed into options."""
        path = tmp_path / "mailtidy.yaml"
        path.write_text(
            "ascii_only: false\n"
            "blocklist:\n"
            "  block:\n"
            "    wildcard: ['*.spam.com']\n"
            "fuzzy_matching:\n"
            "  enabled: true\n",
            encoding="utf-8",
        )

        options = load_options(path)

        assert options.ascii_only is False
        assert options.blocklist is not None
        assert options.blocklist.block.wildcard == ("*.spam.com",)
        assert options.fuzzy_matching.enabled is True

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file gives default options."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_options(path) == EmailOptions()

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            load_options(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Unparseable YAML raises ConfigurationError."""
        path = tmp_path / "bad.yaml"
        path.write_text("ascii_only: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_options(path)
