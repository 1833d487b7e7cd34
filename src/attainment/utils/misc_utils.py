# src/attainment/utils/misc_utils.py
import hashlib
import json
import re
import unicodedata
from typing import Any


def generate_canonical_id(*args: str) -> str:
    """Generates a consistent, URL-safe ID from one or more strings."""
    combined = "_".join(str(arg).lower() for arg in args if arg)
    # Accented letters fold to ASCII so "Expansão" and "Expansao" agree
    combined = (
        unicodedata.normalize("NFKD", combined).encode("ascii", "ignore").decode()
    )
    # Remove non-alphanumeric characters (except underscore)
    safe_string = re.sub(r"[^\w]+", "", combined.replace(" ", "_"))
    if len(safe_string) > 100:
        return hashlib.sha1(safe_string.encode()).hexdigest()[:16]  # Short hash
    return safe_string


def stable_digest(payload: Any) -> str:
    """SHA-1 of the canonical JSON form of ``payload``."""
    canonical = json.dumps(payload, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha1(canonical.encode("utf-8")).hexdigest()


def generate_composite_key(*parts: str) -> str:
    """Joins the slug of each part with ``||``, which no slug can contain."""
    return "||".join(generate_canonical_id(part) if part else "" for part in parts)
