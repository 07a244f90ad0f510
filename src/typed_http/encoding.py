"""
application/x-www-form-urlencoded encoding for form bodies.
"""

import logging
from collections.abc import Mapping
from urllib.parse import quote

logger = logging.getLogger(__name__)

# Values accepted in form parameters
FormValue = str | int | float | bool


def encode_component(text: str) -> str:
    """
    Percent-encode text for a query or body component.

    Text that cannot be encoded as UTF-8 is returned unescaped.
    """
    try:
        return quote(text, safe="")
    except UnicodeEncodeError:
        logger.debug(f"Could not percent-encode {text!r}, using it unescaped")
        return text


def stringify(value: FormValue) -> str:
    """Convert a form value to text independently of the locale."""
    # bool is a subclass of int, so it has to be checked first
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def url_encoded_string(parameters: Mapping[str, FormValue]) -> str:
    """
    Build a `k1=v1&k2=v2` form string.

    Args:
        parameters: Form fields in the order they should appear

    Returns:
        The encoded form string
    """
    return "&".join(f"{encode_component(key)}={encode_component(stringify(value))}" for key, value in parameters.items())


def url_encoded_data(parameters: Mapping[str, FormValue]) -> bytes:
    """UTF-8 bytes of `url_encoded_string(parameters)`."""
    return url_encoded_string(parameters).encode("utf-8", errors="surrogatepass")
