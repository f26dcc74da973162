# edgeauth/codec.py

"""
Unpadded base64url encoding used by every token segment.

Thin wrappers around PyJWT's `jwt.utils` helpers. Decoding is stricter than
the helper it delegates to: the standard library decoder silently drops
unknown characters, so the alphabet is checked first.
"""

import binascii
import re

from jwt.utils import base64url_decode, base64url_encode

from edgeauth.exceptions import DecodeError

_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


def encode(data: bytes) -> str:
    """
    Encode bytes as base64url text with all `=` padding stripped.
    """
    return base64url_encode(data).decode("ascii")


def decode(text: str) -> bytes:
    """
    Decode unpadded base64url text.

    Args:
        text (str): Base64url text without padding.

    Returns:
        bytes: The decoded buffer.

    Raises:
        DecodeError: If `text` has characters outside the base64url alphabet
            or a length no base64 encoding can produce.
    """
    if not _ALPHABET.fullmatch(text):
        raise DecodeError("invalid base64url character")
    # one leftover character cannot carry a full byte
    if len(text) % 4 == 1:
        raise DecodeError("invalid base64url length")
    try:
        return base64url_decode(text)
    except binascii.Error as e:
        raise DecodeError(str(e)) from e
