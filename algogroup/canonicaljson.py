"""RFC 8785 JSON Canonicalization Scheme (JCS) wrapper.

Delegates to the ``jcs`` library (a Python implementation of RFC 8785).
Envelope batches handed to out-of-process signers are serialized through
here so the same batch always produces the same bytes.
"""

import jcs as _jcs

from .errors import CanonicalizationError


def canonicalize(obj: dict | list) -> bytes:
    """Canonicalize a JSON-serializable object or array to UTF-8 bytes per RFC 8785.

    Args:
        obj: A JSON-serializable dictionary or list.

    Returns:
        Canonical JSON encoded as UTF-8 bytes.

    Raises:
        CanonicalizationError: If the input cannot be canonicalized.
    """
    if not isinstance(obj, (dict, list)):
        raise CanonicalizationError("Input must be a JSON object or array")
    try:
        return _jcs.canonicalize(obj)
    except Exception as e:
        raise CanonicalizationError(f"Canonicalization failed: {e}") from e
