"""Transform stages for email address repair.

Each stage is a pure function from string to StageResult. Stages assume
the ones before them have run (e.g. typo fixing expects a lowercased,
tidied address), so they must be applied in this order:

1. trim
2. lowercase
3. strip_display_name_and_comments
4. deobfuscate
5. normalize_unicode_symbols
6. tidy_punctuation
7. fix_typos
8. to_ascii
"""

import re
import unicodedata
from collections.abc import Mapping
from dataclasses import dataclass

import neologdn

from mailtidy.patterns.blocklist import tld_of


@dataclass(frozen=True, slots=True)
class StageResult:
    """Output of one stage.

    Attributes:
        out: The transformed string.
        changed: Whether ``out`` differs from the input.
    """

    out: str
    changed: bool


def _result(original: str, out: str) -> StageResult:
    return StageResult(out=out, changed=out != original)


# "Name <addr>" wrappers
_ANGLE_ADDRESS = re.compile(r"<\s*([^<>]+?)\s*>")

# "at" and "dot", full-width letters and a zero for "o" included
_AT_WORD = r"[aａ][tｔ]"
_DOT_WORD = r"[dｄ][o0ｏ０][tｔ]"
_OPEN_BRACKET = r"[(\[{（［｛]"
_CLOSE_BRACKET = r"[)\]}）］｝]"

# (comments), except "(at)" / "(dot)" which deobfuscate handles
_COMMENT = re.compile(rf"\s*\((?!\s*(?:{_AT_WORD}|{_DOT_WORD})\s*\))[^()]*\)\s*", re.IGNORECASE)

_MAILTO = re.compile(r"^mailto:", re.IGNORECASE)

_BRACKETED_AT = re.compile(rf"{_OPEN_BRACKET}\s*{_AT_WORD}\s*{_CLOSE_BRACKET}", re.IGNORECASE)
_SPACED_AT = re.compile(rf"\s+{_AT_WORD}\s+", re.IGNORECASE)
_BRACKETED_DOT = re.compile(rf"{_OPEN_BRACKET}\s*{_DOT_WORD}\s*{_CLOSE_BRACKET}", re.IGNORECASE)
_SPACED_DOT = re.compile(rf"\s+{_DOT_WORD}\s+", re.IGNORECASE)
_REPEATED_AT = re.compile(r"@{2,}")

# Symbols NFKC leaves alone but users type in place of "@" and "."
_SYMBOL_TRANSLATION = str.maketrans(
    {
        "。": ".",  # ideographic full stop
        "｡": ".",  # halfwidth ideographic full stop
        "﹒": ".",  # small full stop
        "․": ".",  # one dot leader
        "﹫": "@",  # small commercial at
    }
)

_SPACE_AROUND_AT = re.compile(r"\s*@\s*")
_SPACE_AROUND_DOT = re.compile(r"\s*\.\s*")
_REPEATED_DOTS = re.compile(r"\.{2,}")
_EDGE_PUNCTUATION = re.compile(r"^[\s;,.]+|[\s;,.]+$")

# Letters NFKD does not decompose into ASCII
_TRANSLITERATION = str.maketrans(
    {
        "ß": "ss",
        "æ": "ae",
        "œ": "oe",
        "ø": "o",
        "đ": "d",
        "ð": "d",
        "ł": "l",
        "þ": "th",
        "ı": "i",
        "ħ": "h",
    }
)


def trim(s: str) -> StageResult:
    """Remove surrounding whitespace, Unicode spaces included."""
    return _result(s, s.strip())


def lowercase(s: str) -> StageResult:
    """Lowercase the whole address.

    Domains are case-insensitive; lowercasing the local part too is a
    simplification that matches what mail providers do in practice.
    """
    return _result(s, s.lower())


def strip_display_name_and_comments(s: str) -> StageResult:
    """Remove display names, comments and a ``mailto:`` prefix.

    ``John Doe <john@x.com>`` becomes ``john@x.com``; ``john(work)@x.com``
    becomes ``john@x.com``.
    """
    out = s
    match = _ANGLE_ADDRESS.search(out)
    if match:
        out = match.group(1)

    out = _COMMENT.sub("", out)
    out = _MAILTO.sub("", out.strip())
    return _result(s, out)


def deobfuscate(s: str) -> StageResult:
    """Replace spelled-out "at" and "dot" with ``@`` and ``.``.

    Full-width spellings (``ａｔ``, ``ｄｏｔ``) and brackets count too.

    Only standalone or bracketed words are replaced, so domains such as
    ``mailinator.com`` keep their letters. Runs of ``@`` collapse to one.
    """
    out = _BRACKETED_AT.sub("@", s)
    out = _SPACED_AT.sub("@", out)
    out = _BRACKETED_DOT.sub(".", out)
    out = _SPACED_DOT.sub(".", out)
    out = _REPEATED_AT.sub("@", out)
    return _result(s, out)


def normalize_unicode_symbols(s: str) -> StageResult:
    """Fold full-width and compatibility characters.

    ``ｊｏｈｎ＠ｅｘａｍｐｌｅ．ｃｏｍ`` becomes ``john@example.com``.
    Accented letters are composed (NFKC) but kept; ``to_ascii`` decides
    whether they survive. ASCII input is returned untouched.
    """
    if s.isascii():
        return StageResult(out=s, changed=False)

    # neologdn handles width variants; tildes are legal in local parts,
    # so tilde-like characters are mapped to "~" rather than dropped
    out = neologdn.normalize(s, tilde="normalize")
    out = unicodedata.normalize("NFKC", out)
    out = out.translate(_SYMBOL_TRANSLATION)
    # NFKC can surface capitals (e.g. letterlike symbols)
    out = out.lower()
    return _result(s, out)


def tidy_punctuation(s: str) -> StageResult:
    """Clean up spacing and punctuation debris.

    - whitespace around ``@`` and ``.`` is removed
    - commas in the domain become dots (``a@gmail,com``)
    - repeated dots collapse (``a..b`` -> ``a.b``)
    - dots next to ``@`` are dropped
    - leading and trailing ``;``, ``,`` and ``.`` are stripped
    """
    out = s.strip()
    out = _SPACE_AROUND_AT.sub("@", out)
    out = _SPACE_AROUND_DOT.sub(".", out)

    local, at, domain = out.rpartition("@")
    if at:
        out = f"{local}@{domain.replace(',', '.')}"

    out = _REPEATED_DOTS.sub(".", out)
    out = out.replace("@.", "@").replace(".@", "@")
    out = _EDGE_PUNCTUATION.sub("", out)
    return _result(s, out)


def fix_typos(s: str, domains: Mapping[str, str], tlds: Mapping[str, str]) -> StageResult:
    """Apply the domain typo table, then the TLD typo table.

    Only the domain (after the last ``@``) is looked at. An exact domain
    hit wins; otherwise the longest matching TLD typo is replaced once.

    Args:
        s: Tidied, lowercased address.
        domains: Exact domain corrections, e.g. ``gmai.com -> gmail.com``.
        tlds: TLD corrections with leading dots, e.g. ``.con -> .com``.
    """
    local, at, domain = s.rpartition("@")
    if not at or not domain:
        return StageResult(out=s, changed=False)

    fixed = domains.get(domain)
    if fixed is None:
        fixed = _fix_tld(domain, tlds)

    if fixed == domain:
        return StageResult(out=s, changed=False)
    return StageResult(out=f"{local}@{fixed}", changed=True)


def _fix_tld(domain: str, tlds: Mapping[str, str]) -> str:
    if tld_of(domain) is None:
        return domain

    for bad in sorted(tlds, key=len, reverse=True):
        if len(domain) > len(bad) and domain.endswith(bad):
            return domain[: -len(bad)] + tlds[bad]
    return domain


def to_ascii(s: str) -> StageResult:
    """Transliterate to ASCII, dropping what has no ASCII form.

    ``josé`` becomes ``jose``, ``straße`` becomes ``strasse``; characters
    such as CJK ideographs are removed.
    """
    if s.isascii():
        return StageResult(out=s, changed=False)

    out = s.translate(_TRANSLITERATION)
    out = unicodedata.normalize("NFKD", out)
    out = "".join(c for c in out if not unicodedata.combining(c))
    out = out.encode("ascii", "ignore").decode("ascii")
    return _result(s, out)
