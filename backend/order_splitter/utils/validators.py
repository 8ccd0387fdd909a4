"""
Validators — Small rule-based checks shared by the request schemas.
"""
import re

_URL_RE = re.compile(r"^https?://([^\s/$.?#:]+\.)+[^\s/$.?#:]{2,}(:\d+)?([/?#][^\s]*)?$", re.IGNORECASE)
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def validate_url(url: str | None) -> bool:
    """Validate a web link such as an InstaPay payment link.

    The scheme is optional (``ipn.eg/S/user/instapay/abc`` is accepted) but,
    when present, must be http or https. The host needs a dotted domain.
    """
    if not url:
        return False
    url = url.strip()
    if not _SCHEME_RE.match(url):
        url = f"https://{url}"
    return bool(_URL_RE.match(url))


def clean_text(value):
    """Strip surrounding whitespace from string input; other types pass through."""
    if isinstance(value, str):
        return value.strip()
    return value


def name_key(name: str) -> str:
    """Case-insensitive identity of a friend's name within a session."""
    return name.strip().lower()
