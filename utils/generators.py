import re
import secrets
import string

_ALPHABET = string.ascii_lowercase + string.digits


def _random_suffix(length: int = 10) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def gen_username() -> str:
    """Random username such as `user-k3j9x0a1bq` (fits the 20 char limit)."""
    return f"user-{_random_suffix()}"


def generate_slug(title: str) -> str:
    """URL-friendly, unique-ish slug: `my-title-abc123def0`."""
    slug = title.lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")
    suffix = _random_suffix()
    return f"{slug[:200]}-{suffix}" if slug else suffix
