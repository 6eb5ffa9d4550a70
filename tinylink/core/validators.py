"""
Input Validators and Code Generation

Validation for the two user inputs the service accepts (target URLs and
requested short codes) plus the random code generator.

Short codes are public identifiers, not secrets, so a statistically uniform
non-cryptographic source is enough. Pass a different ``rng`` (for example
``random.SystemRandom()``) to ``generate_short_code`` if that ever changes.
"""

import random
import re
import string
from typing import Optional
from urllib.parse import urlparse

SHORT_CODE_CHARS = string.ascii_uppercase + string.ascii_lowercase + string.digits
SHORT_CODE_MIN_LENGTH = 6
SHORT_CODE_MAX_LENGTH = 8
MAX_URL_LENGTH = 2048

_SHORT_CODE_RE = re.compile(
    rf"[A-Za-z0-9]{{{SHORT_CODE_MIN_LENGTH},{SHORT_CODE_MAX_LENGTH}}}"
)

ALLOWED_SCHEMES = {"http", "https"}

# Host names after IDNA encoding: dot-separated labels of letters, digits, - and _
_HOST_LABEL = r"[a-z0-9_](?:[a-z0-9_-]*[a-z0-9_])?"
_HOST_RE = re.compile(rf"{_HOST_LABEL}(?:\.{_HOST_LABEL})*\.?")
# Bracketed IPv6 literal as returned by urlparse().hostname (brackets stripped)
_IPV6_RE = re.compile(r"[0-9a-f:.]+")


def is_valid_url(url: str) -> bool:
    """
    Validate that ``url`` is an absolute http(s) URL with a host.

    Args:
        url: The URL string to validate

    Returns:
        True if valid, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    if len(url) > MAX_URL_LENGTH:
        return False

    try:
        result = urlparse(url)
        # Accessing .port raises ValueError for garbage like "http://host:abc"
        result.port
    except ValueError:
        return False

    if result.scheme.lower() not in ALLOWED_SCHEMES:
        return False

    return is_valid_host(result.hostname)


def is_valid_host(hostname: Optional[str]) -> bool:
    """Return True if ``hostname`` is a well-formed DNS name, IPv4 or IPv6 literal."""
    if not hostname:
        return False

    try:
        ascii_host = hostname.encode("idna").decode("ascii")
    except UnicodeError:
        return False

    if ":" in ascii_host:
        return _IPV6_RE.fullmatch(ascii_host) is not None
    return _HOST_RE.fullmatch(ascii_host) is not None


def is_valid_short_code(code: Optional[str]) -> bool:
    """Return True if ``code`` is 6-8 ASCII letters or digits."""
    if not isinstance(code, str):
        return False
    return _SHORT_CODE_RE.fullmatch(code) is not None


def generate_short_code(
    length: int = SHORT_CODE_MIN_LENGTH,
    rng: Optional[random.Random] = None
) -> str:
    """
    Draw ``length`` characters uniformly from the 62-character alphabet.

    Example:
        generate_short_code() -> "aZ3kQ9"
    """
    rng = rng or random
    return "".join(rng.choices(SHORT_CODE_CHARS, k=length))
