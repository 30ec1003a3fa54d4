"""Tests for the individual transform stages."""

from mailtidy.config import default_fix_domains, default_fix_tlds
from mailtidy.pipeline.stages import (
    deobfuscate,
    fix_typos,
    lowercase,
    normalize_unicode_symbols,
    strip_display_name_and_comments,
    tidy_punctuation,
    to_ascii,
    trim,
)


class TestTrimAndLowercase:
    """Tests for trim and lowercase."""

    def test_trim(self) -> None:
        """Surrounding whitespace is removed."""
        result = trim("  jane@company.com\t")

        assert result.out == "jane@company.com"
        assert result.changed

    def test_trim_unicode_space(self) -> None:
        """Ideographic spaces count as whitespace."""
        assert trim("　jane@company.com　").out == "jane@company.com"

    def test_trim_unchanged(self) -> None:
        """Nothing to trim reports no change."""
        assert not trim("jane@company.com").changed

    def test_lowercase(self) -> None:
        """The whole address is lowercased."""
        result = lowercase("Jane.Doe@Company.COM")

        assert result.out == "jane.doe@company.com"
        assert result.changed
        assert not lowercase("jane@company.com").changed


class TestStripDisplayNameAndComments:
    """Tests for strip_display_name_and_comments."""

    def test_display_name(self) -> None:
        """Only the address inside angle brackets is kept."""
        assert strip_display_name_and_comments("jane doe <jane@company.com>").out == "jane@company.com"

    def test_angle_brackets_with_spaces(self) -> None:
        """Spaces inside the brackets are dropped."""
        assert strip_display_name_and_comments("< jane@company.com >").out == "jane@company.com"

    def test_comment(self) -> None:
        """Parenthesized comments are removed."""
        assert strip_display_name_and_comments("jane(work)@company.com").out == "jane@company.com"
        assert strip_display_name_and_comments("jane@company.com (home)").out == "jane@company.com"

    def test_mailto(self) -> None:
        """A mailto: scheme is dropped."""
        assert strip_display_name_and_comments("mailto:jane@company.com").out == "jane@company.com"

    def test_obfuscation_tokens_kept(self) -> None:
        """(at) and (dot) are left for deobfuscation."""
        result = strip_display_name_and_comments("jane(at)company(dot)com")

        assert result.out == "jane(at)company(dot)com"
        assert not result.changed


class TestDeobfuscate:
    """Tests for deobfuscate."""

    def test_bracketed(self) -> None:
        """Bracketed at/dot in any bracket style."""
        assert deobfuscate("jane[at]company[dot]com").out == "jane@company.com"
        assert deobfuscate("jane(at)company(dot)com").out == "jane@company.com"
        assert deobfuscate("jane{at}company{dot}com").out == "jane@company.com"

    def test_spaced_words(self) -> None:
        """Standalone words separated by spaces."""
        assert deobfuscate("jane at company dot com").out == "jane@company.com"

    def test_zero_for_o(self) -> None:
        """d0t is treated like dot."""
        assert deobfuscate("jane@company[d0t]com").out == "jane@company.com"
        assert deobfuscate("jane@company d0t com").out == "jane@company.com"

    def test_fullwidth_words(self) -> None:
        """Full-width at/dot words, spaces and brackets are replaced."""
        assert deobfuscate("ｊａｎｅ ａｔ ｇｍａｉｌ ｄｏｔ ｃｏｍ").out == "ｊａｎｅ@ｇｍａｉｌ.ｃｏｍ"
        assert deobfuscate("jane　ＡＴ　company　ＤＯＴ　com").out == "jane@company.com"
        assert deobfuscate("jane［ａｔ］company（ｄ０ｔ）com").out == "jane@company.com"

    def test_repeated_at(self) -> None:
        """Runs of @ collapse to one."""
        assert deobfuscate("jane@@company.com").out == "jane@company.com"

    def test_words_inside_domain_untouched(self) -> None:
        """Letters spelling at or dot inside words are kept."""
        result = deobfuscate("pat@mailinator.com")

        assert result.out == "pat@mailinator.com"
        assert not result.changed


class TestNormalizeUnicodeSymbols:
    """Tests for normalize_unicode_symbols."""

    def test_fullwidth(self) -> None:
        """Full-width letters and symbols become ASCII."""
        result = normalize_unicode_symbols("ｊａｎｅ＠ｃｏｍｐａｎｙ．ｃｏｍ")

        assert result.out == "jane@company.com"
        assert result.changed

    def test_fullwidth_capitals_lowercased(self) -> None:
        """Capitals surfaced by folding are lowercased."""
        assert normalize_unicode_symbols("ＪＡＮＥ@company.com").out == "jane@company.com"

    def test_ideographic_full_stop(self) -> None:
        """Ideographic full stops become dots."""
        assert normalize_unicode_symbols("jane@company。com").out == "jane@company.com"

    def test_small_at(self) -> None:
        """Small commercial at becomes @."""
        assert normalize_unicode_symbols("jane﹫company.com").out == "jane@company.com"

    def test_ascii_untouched(self) -> None:
        """ASCII input is returned as-is."""
        result = normalize_unicode_symbols("jane~doe@company.com")

        assert result.out == "jane~doe@company.com"
        assert not result.changed

    def test_tildes_kept(self) -> None:
        """Tildes survive width folding; they are legal in local parts."""
        assert normalize_unicode_symbols("jane~doe＠company.com").out == "jane~doe@company.com"

    def test_diacritics_kept(self) -> None:
        """Accented letters survive; to_ascii handles them."""
        assert normalize_unicode_symbols("josé@company.com").out == "josé@company.com"


class TestTidyPunctuation:
    """Tests for tidy_punctuation."""

    def test_spaces_around_separators(self) -> None:
        """Whitespace around @ and . is removed."""
        assert tidy_punctuation("jane @ company . com").out == "jane@company.com"

    def test_comma_in_domain(self) -> None:
        """Commas in the domain become dots."""
        assert tidy_punctuation("jane@gmail,com").out == "jane@gmail.com"

    def test_repeated_dots(self) -> None:
        """Runs of dots collapse."""
        assert tidy_punctuation("jane..doe@company...com").out == "jane.doe@company.com"

    def test_dots_next_to_at(self) -> None:
        """Dots adjacent to @ are dropped."""
        assert tidy_punctuation("jane.@.company.com").out == "jane@company.com"

    def test_edge_punctuation(self) -> None:
        """Leading and trailing separators are stripped."""
        assert tidy_punctuation(";jane@company.com.,").out == "jane@company.com"

    def test_clean_input_unchanged(self) -> None:
        """Nothing to tidy reports no change."""
        assert not tidy_punctuation("jane.doe@company.com").changed


class TestFixTypos:
    """Tests for fix_typos."""

    def test_domain_table(self) -> None:
        """Exact domain typos are corrected."""
        result = fix_typos("jane@gmai.com", default_fix_domains(), default_fix_tlds())

        assert result.out == "jane@gmail.com"
        assert result.changed

    def test_tld_table(self) -> None:
        """TLD typos are corrected on any domain."""
        assert fix_typos("jane@company.con", {}, default_fix_tlds()).out == "jane@company.com"
        assert fix_typos("jane@company.ogr", {}, default_fix_tlds()).out == "jane@company.org"

    def test_domain_table_wins(self) -> None:
        """An exact domain hit takes precedence over TLD rules."""
        result = fix_typos("jane@gmail.con", {"gmail.con": "gmail.com"}, {".con": ".org"})

        assert result.out == "jane@gmail.com"

    def test_longest_tld_wins(self) -> None:
        """The longest matching TLD typo is applied, once."""
        result = fix_typos("jane@company.cm", {}, {".m": ".net", ".cm": ".com"})

        assert result.out == "jane@company.com"

    def test_local_part_ignored(self) -> None:
        """Typos are only looked for in the domain."""
        result = fix_typos("gmai.com@company.com", default_fix_domains(), default_fix_tlds())

        assert not result.changed

    def test_correct_domains_unchanged(self) -> None:
        """Correct domains are left alone."""
        for address in ("jane@gmail.com", "jane@company.co.uk", "jane@company.net"):
            assert not fix_typos(address, default_fix_domains(), default_fix_tlds()).changed

    def test_no_domain(self) -> None:
        """Strings without a domain pass through."""
        assert not fix_typos("jane", default_fix_domains(), default_fix_tlds()).changed
        assert not fix_typos("jane@localhost", {}, default_fix_tlds()).changed


class TestToAscii:
    """Tests for to_ascii."""

    def test_diacritics(self) -> None:
        """Accents are removed."""
        result = to_ascii("josé@company.com")

        assert result.out == "jose@company.com"
        assert result.changed

    def test_ligatures(self) -> None:
        """Letters without a decomposition are transliterated."""
        assert to_ascii("straße@company.de").out == "strasse@company.de"
        assert to_ascii("søren@company.dk").out == "soren@company.dk"

    def test_untransliterable_dropped(self) -> None:
        """Characters with no ASCII form are removed."""
        assert to_ascii("李jane@company.com").out == "jane@company.com"

    def test_ascii_unchanged(self) -> None:
        """ASCII input is not touched."""
        assert not to_ascii("jane@company.com").changed
