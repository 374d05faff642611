import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_ALPHABET = string.digits + string.ascii_lowercase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def now_millis() -> int:
    return int(time.time() * 1000)


def random_token(length: int = 9, rng: Optional[random.Random] = None) -> str:
    """Lowercase base36 string, e.g. for payment references and guest ids."""
    rng = rng or random
    return "".join(rng.choice(_ALPHABET) for _ in range(length))


def make_reference(prefix: str, rng: Optional[random.Random] = None) -> str:
    return f"{prefix}_{now_millis()}_{random_token(rng=rng)}"


def serialize_doc(doc: Optional[Dict[str, Any]]):
    if not doc:
        return doc
    doc = dict(doc)
    if doc.get("_id") is not None:
        doc["id"] = str(doc.pop("_id"))
    return doc
