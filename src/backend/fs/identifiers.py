"""
Short file identifiers derived from paths.

Uses SHA-224 over the path string, rendered as lowercase base32. Every entry
of a scan is truncated to the shortest common prefix length that keeps all
identifiers distinct, so ids stay short for small directories and only grow
when the file set needs it.
"""

from __future__ import annotations

import base64
import hashlib
import re
from pathlib import Path
from typing import Iterable, MutableSequence, Protocol


# Hash algorithm to use
HASH_ALGORITHM = "sha224"

# Length of an unpadded base32 SHA-224 digest (224 bits / 5 bits per char)
DIGEST_LENGTH = 45

# A well-formed identifier: lowercase base32 alphabet
ID_PATTERN = re.compile(r"^[a-z2-7]+$")


class Identified(Protocol):
    path: Path
    id: str


def compute_path_digest(path: Path | str) -> str:
    """
    Compute the full identifier digest of a path.

    Args:
        path: The file path; hashed as its string form.

    Returns:
        Lowercase base32 digest without padding.
    """
    digest = hashlib.new(HASH_ALGORITHM, str(path).encode("utf-8")).digest()
    return base64.b32encode(digest).decode("ascii").rstrip("=").lower()


def min_prefix_length(tokens: Iterable[str]) -> int:
    """
    Smallest prefix length that keeps all tokens distinct.

    Falls back to DIGEST_LENGTH when no shorter prefix works (which also
    covers identical tokens).
    """
    tokens = list(tokens)
    for n in range(1, DIGEST_LENGTH):
        seen: set[str] = set()
        for token in tokens:
            prefix = token[:n]
            if prefix in seen:
                break
            seen.add(prefix)
        else:
            return n
    return DIGEST_LENGTH


def assign_identifiers(entries: MutableSequence[Identified]) -> int:
    """
    Set each entry's id to its path digest truncated to the common minimum length.

    Mutates the entries in place.

    Returns:
        The prefix length used.
    """
    digests = [compute_path_digest(entry.path) for entry in entries]
    n = min_prefix_length(digests)
    for entry, digest in zip(entries, digests):
        entry.id = digest[:n]
    return n


def is_valid_id(file_id: str) -> bool:
    return 0 < len(file_id) <= DIGEST_LENGTH and ID_PATTERN.match(file_id) is not None
