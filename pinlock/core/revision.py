"""Revision normalization.

Each VCS prints its current revision differently:

    git rev-parse HEAD          2bebebd91805dbb931317f7a4057e4e8de9d9781
    hg id                       19114a3ee7d5 tip   (or 19114a3ee7d5+ tip)
    bzr log -r-1 --line         50: Dimiter Naydenov 2014-02-12 [merge] ...
    svn info --show-item ...    1234

and mercurial may prefix the payload with "*** failed to import extension"
lines on the same stream. parse_head reduces all of these to the bare token.
"""

import re

from pinlock.domain.exceptions import InvalidRevisionError

DISPLAY_LENGTH = 12

DIAGNOSTIC_PREFIX = "*** "

_REVISION_SEPARATOR = re.compile(r"[ :+]+")
_REVISION_TOKEN = re.compile(r"^[0-9A-Za-z]+$")


def parse_head(output: str | bytes) -> str:
    """Extract the revision identifier from a VCS head command's output.

    Args:
        output: Raw stdout of the head command.

    Returns:
        The untruncated revision.

    Raises:
        InvalidRevisionError: If no plausible revision token is found. The
            full raw output is attached for diagnosis.
    """
    raw = output.decode("utf-8", errors="replace") if isinstance(output, bytes) else output
    text = raw.strip()
    if text.startswith(DIAGNOSTIC_PREFIX):
        text = text[text.rfind("\n") + 1 :]

    candidate = _REVISION_SEPARATOR.split(text, maxsplit=1)[0]
    if not _REVISION_TOKEN.match(candidate):
        raise InvalidRevisionError(raw)
    return candidate


def truncate(revision: str) -> str:
    """Shorten a revision to its 12-character display prefix."""
    return revision.strip()[:DISPLAY_LENGTH]


def revisions_match(declared: str, actual: str) -> bool:
    """Compare two revisions by their 12-character prefixes.

    Lock files store full revisions, but every comparison uses the prefix so
    that a pin written by an older tool in short form still matches.
    """
    return truncate(declared) == truncate(actual)
