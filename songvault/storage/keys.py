"""Storage key derivation and public URL mapping."""
import re
import time
import unicodedata

PUBLIC_URL_PATH = "/storage/v1/object/public"

_COMBINING_MARKS = re.compile("[\u0300-\u036f]")
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def sanitize_filename(filename: str) -> str:
    """Make a filename safe to use as a storage key.

    Accents are stripped (NFD decomposition, then combining marks dropped)
    and anything outside ``[A-Za-z0-9_.-]`` becomes ``_``. Applying it to
    its own output returns the same string.

    Example:
        >>> sanitize_filename("Café del Mar.mp3")
        'Cafe_del_Mar.mp3'
    """
    decomposed = unicodedata.normalize("NFD", filename)
    stripped = _COMBINING_MARKS.sub("", decomposed)
    return _UNSAFE_CHARS.sub("_", stripped)


def build_storage_key(filename: str, now_ms: int | None = None) -> str:
    """Build a ``{millis}_{sanitized filename}`` storage key."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{now_ms}_{sanitize_filename(filename)}"


def public_url_prefix(base_url: str, bucket: str) -> str:
    """Prefix every public URL of a bucket starts with, trailing slash included."""
    return f"{base_url.rstrip('/')}{PUBLIC_URL_PATH}/{bucket}/"


def key_from_public_url(url: str, bucket: str) -> str | None:
    """Take the key after ``/storage/v1/object/public/{bucket}/`` in a URL.

    The host is ignored, so URLs minted under an earlier base URL or a
    custom domain still map to their key. Returns None if the bucket path
    is absent.
    """
    _, sep, key = url.partition(f"{PUBLIC_URL_PATH}/{bucket}/")
    if not sep or not key:
        return None
    return key
