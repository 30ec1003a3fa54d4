"""Pattern databases for email domain and shape checks."""

from mailtidy.patterns.blocklist import (
    BlocklistMatcher,
    compile_wildcard,
    domain_of,
    is_blocked,
    tld_of,
)
from mailtidy.patterns.shape import is_empty, looks_like_email

__all__ = [
    "BlocklistMatcher",
    "compile_wildcard",
    "domain_of",
    "is_blocked",
    "is_empty",
    "looks_like_email",
    "tld_of",
]
