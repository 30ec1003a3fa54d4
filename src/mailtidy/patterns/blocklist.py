"""Block/allow list matching for email domains.

Evaluation order (first decisive rule wins):
1. allow.exact      -> not blocked
2. block.exact      -> blocked
3. block.suffix     -> blocked (dot-boundary aware)
4. block.wildcard   -> blocked (``*`` = one label, ``**`` = one or more)
5. block.tlds       -> blocked
6. otherwise        -> not blocked

All comparisons are case-insensitive.
"""

import logging
import re
from functools import lru_cache

from mailtidy.config import BlockConfig

logger = logging.getLogger(__name__)

_LABEL = r"[^.]+"
_LABELS = r"[^.]+(?:\.[^.]+)*"

# Splits a wildcard pattern into "**", "*" and literal runs
_WILDCARD_TOKEN = re.compile(r"\*\*|\*|[^*]+")


@lru_cache(maxsize=256)
def compile_wildcard(pattern: str) -> re.Pattern[str]:
    """Translate a wildcard pattern into an anchored regex.

    ``*`` matches exactly one dot-delimited label, ``**`` matches one or
    more labels. Everything else is literal.

    Args:
        pattern: Wildcard pattern such as ``*.mailinator.com``.

    Returns:
        Compiled pattern matching the full domain.
    """
    parts: list[str] = []
    for token in _WILDCARD_TOKEN.findall(pattern.strip().lower()):
        if token == "**":
            parts.append(_LABELS)
        elif token == "*":
            parts.append(_LABEL)
        else:
            parts.append(re.escape(token))
    return re.compile("".join(parts), re.IGNORECASE)


def domain_of(address: str) -> str:
    """Return the part after the last ``@``, or the input if there is none."""
    _, at, domain = address.rpartition("@")
    return domain if at else address


def tld_of(domain: str) -> str | None:
    """Return the TLD including its leading dot, or None without a dot."""
    dot = domain.rfind(".")
    if dot == -1:
        return None
    return domain[dot:]


class BlocklistMatcher:
    """Compiled block/allow rules.

    Compiles the rule set once; ``is_blocked`` keeps no state between calls,
    so one matcher can be shared freely.
    """

    def __init__(self, config: BlockConfig) -> None:
        """Initialize the matcher.

        Args:
            config: Block and allow rules.
        """
        self._allow_exact = frozenset(d.lower() for d in config.allow.exact)
        self._block_exact = frozenset(d.lower() for d in config.block.exact)
        # ".local" and "local" both mean "the label local and anything under it"
        self._suffixes = tuple(s.lower().lstrip(".") for s in config.block.suffix if s.strip("."))
        self._wildcards = tuple(compile_wildcard(w) for w in config.block.wildcard if w.strip())
        self._tlds = frozenset(
            t.lower() if t.startswith(".") else f".{t.lower()}" for t in config.block.tlds if t.strip(".")
        )

    def is_blocked(self, domain: str) -> bool:
        """Check a domain (or full address) against the rules.

        Args:
            domain: Domain such as ``mailinator.com``. A full address is
                accepted; only the part after the last ``@`` is checked.

        Returns:
            True if a block rule matches and no allow rule does.
        """
        d = domain_of(domain.strip()).lower()
        if not d:
            return False

        if d in self._allow_exact:
            return False

        if d in self._block_exact:
            logger.debug("Domain %s blocked by exact rule", d)
            return True

        for suffix in self._suffixes:
            if d == suffix or d.endswith(f".{suffix}"):
                logger.debug("Domain %s blocked by suffix .%s", d, suffix)
                return True

        for pattern in self._wildcards:
            if pattern.fullmatch(d):
                logger.debug("Domain %s blocked by wildcard %s", d, pattern.pattern)
                return True

        tld = tld_of(d)
        if tld is not None and tld in self._tlds:
            logger.debug("Domain %s blocked by TLD %s", d, tld)
            return True

        return False


def is_blocked(domain: str, config: BlockConfig) -> bool:
    """Check a domain against a block configuration.

    Compiles ``config`` for this call; hold a ``BlocklistMatcher`` to reuse
    the compiled rules.
    """
    return BlocklistMatcher(config).is_blocked(domain)
