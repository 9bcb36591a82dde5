from __future__ import annotations

import unicodedata
import uuid
from datetime import datetime, timezone
from typing import Optional


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def norm_upper(value: Optional[str]) -> str:
    if value is None:
        return ""
    return str(value).strip().upper()


def fold_accents(value: str) -> str:
    # "Código" -> "codigo"
    decomposed = unicodedata.normalize("NFKD", str(value))
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower()
