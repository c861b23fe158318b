"""Cross-origin policy attached to every gateway response."""

from typing import Dict, Mapping, Optional

_CORS_POLICY = (
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "GET, OPTIONS"),
    # Range has to be allowed explicitly or browsers cannot ask for partial content.
    ("Access-Control-Allow-Headers", "Content-Type, Range"),
    # Media elements need these to seek cross-origin.
    ("Access-Control-Expose-Headers", "Content-Length, Content-Range"),
)


def cors_headers(extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Return a fresh header dict with the CORS policy, merged with ``extra``."""
    headers = dict(_CORS_POLICY)
    if extra:
        headers.update(extra)
    return headers
