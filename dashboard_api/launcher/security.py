import hmac

from fastapi import Header, HTTPException

from .config import settings

API_KEY_HEADER = "X-API-Key"


def require_api_key(x_api_key: str | None = Header(default=None, alias=API_KEY_HEADER)):
    """Reject requests without the configured dashboard key; open when no key is set."""
    expected = settings.api_key
    if not expected:
        return
    if x_api_key is None or not hmac.compare_digest(x_api_key, expected):
        raise HTTPException(status_code=401, detail="Invalid API key")
