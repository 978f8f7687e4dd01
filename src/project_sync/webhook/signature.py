"""GitHub webhook signature verification.

GitHub signs every delivery with HMAC-SHA256 of the raw request body using
the webhook secret and sends the hex digest as
``X-Hub-Signature-256: sha256=<hex>``. The digest must be computed over
the exact bytes received; parsing and re-serializing the JSON first changes
whitespace and key order and breaks the signature.
"""

import hashlib
import hmac
import logging
import string
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="

_HEX_DIGITS = frozenset(string.hexdigits)


def compute_signature(raw_body: bytes, secret: bytes) -> str:
    """Return the lowercase hex HMAC-SHA256 digest of ``raw_body``."""
    return hmac.new(secret, raw_body, hashlib.sha256).hexdigest()


def constant_time_equals(a: Sequence[int], b: Sequence[int]) -> bool:
    """Compare two byte sequences in time independent of their content.

    Every byte pair is visited and the XOR differences are OR-ed into an
    accumulator, so a mismatch in the first byte costs the same as one in
    the last. Lengths are compared up front; the length of a hex digest is
    public.

    Args:
        a: First byte sequence.
        b: Second byte sequence.

    Returns:
        True if both sequences hold the same bytes.
    """
    if len(a) != len(b):
        return False
    result = 0
    for x, y in zip(a, b):
        result |= x ^ y
    return result == 0


def verify_signature(
    raw_body: bytes,
    provided_header: Optional[str],
    secret: bytes,
) -> bool:
    """Check a webhook delivery against its signature header.

    Never raises: a missing header, a missing ``sha256=`` prefix, or a
    digest that is not hex all count as a failed verification.

    Args:
        raw_body: The request body exactly as received.
        provided_header: Value of the X-Hub-Signature-256 header, if any.
        secret: The shared webhook secret.

    Returns:
        True if the header carries the correct HMAC of ``raw_body``.
    """
    if not provided_header:
        logger.warning("Missing %s header", SIGNATURE_HEADER)
        return False

    if not provided_header.startswith(SIGNATURE_PREFIX):
        logger.warning("Signature header lacks %r prefix", SIGNATURE_PREFIX)
        return False

    provided = provided_header[len(SIGNATURE_PREFIX):]
    if not provided or not all(ch in _HEX_DIGITS for ch in provided):
        logger.warning("Signature header is not a hex digest")
        return False

    expected = compute_signature(raw_body, secret)
    return constant_time_equals(
        provided.lower().encode("ascii"),
        expected.encode("ascii"),
    )
