"""Structural ciphertext detection for secret columns."""

import re

MIN_CIPHERTEXT_LENGTH = 32
_HEX_PATTERN = re.compile(r"[0-9a-fA-F]+")


def is_ciphertext(value) -> bool:
    """Return True when ``value`` looks like stored ciphertext.

    Ciphertext is a hexadecimal string of at least 32 characters. Anything
    else is treated as plaintext, which lets legacy unencrypted rows live in
    the same column. A plaintext secret that is itself 32+ hex characters is
    misclassified as ciphertext.
    """
    if not isinstance(value, str) or len(value) < MIN_CIPHERTEXT_LENGTH:
        return False
    return _HEX_PATTERN.fullmatch(value) is not None
