"""Structural checks for ``local@domain`` addresses.

Practical rather than RFC-complete: quoted local parts, IP literals and
comments are rejected.
"""

import re

MAX_LOCAL_LENGTH = 64
MAX_DOMAIN_LENGTH = 253

_LOCAL_FORBIDDEN = re.compile(r'[\s"<>;,()\[\]{}]')
_DOMAIN_FORBIDDEN = re.compile(r"[\s;,(){}<>_+\[\]]")
_DOMAIN_EDGE = re.compile(r"^[.-]|[.-]$")
_TLD = re.compile(r"\.([A-Za-z]{2,})$")


def is_empty(value: str | None) -> bool:
    """Check whether a value is missing or whitespace only."""
    return value is None or not value.strip()


def looks_like_email(value: str) -> bool:
    """Check whether a string has the shape of an email address.

    Requires exactly one ``@``, a non-empty local part that neither starts
    nor ends with a dot, no consecutive dots, a dotted domain that does not
    start or end with ``.`` or ``-``, and an alphabetic TLD of two or more
    letters. Non-ASCII letters are allowed outside the TLD.

    Args:
        value: Candidate address.

    Returns:
        True if the string looks like an address.
    """
    if ".." in value:
        return False

    local, at, domain = value.partition("@")
    if not at or "@" in domain:
        return False

    if not local or local.startswith(".") or local.endswith("."):
        return False
    if len(local) > MAX_LOCAL_LENGTH or _LOCAL_FORBIDDEN.search(local):
        return False

    if not domain or len(domain) > MAX_DOMAIN_LENGTH:
        return False
    if _DOMAIN_FORBIDDEN.search(domain):
        return False
    if "." not in domain or _DOMAIN_EDGE.search(domain):
        return False

    return _TLD.search(domain) is not None
