from __future__ import annotations

import logging
from typing import Iterable

import pandas as pd
import streamlit as st

from stockcount.config import Settings, get_settings
from stockcount.db import ensure_schema, get_conn
from stockcount.models import InventoryItem
from stockcount.services.catalog import fetch_all
from stockcount.state import ActivityLog, InventoryCache

logger = logging.getLogger(__name__)

CACHE_KEY = "stockcount_cache"
LOG_KEY = "stockcount_log"


def page_context() -> tuple[Settings, object]:
    settings = get_settings()
    conn = get_conn(settings.db_path)
    ensure_schema(conn)
    return settings, conn


def session_cache(conn) -> InventoryCache:
    if CACHE_KEY not in st.session_state:
        st.session_state[CACHE_KEY] = InventoryCache.from_snapshot(fetch_all(conn))
        logger.debug("Loaded inventory cache from the database")
    return st.session_state[CACHE_KEY]


def reload_cache(conn) -> InventoryCache:
    st.session_state.pop(CACHE_KEY, None)
    return session_cache(conn)


def activity_log() -> ActivityLog:
    if LOG_KEY not in st.session_state:
        st.session_state[LOG_KEY] = ActivityLog()
    return st.session_state[LOG_KEY]


def format_discrepancy(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def items_frame(items: Iterable[InventoryItem], cache: InventoryCache | None = None) -> pd.DataFrame:
    rows = []
    for i in items:
        row = {
            "Code": i.code,
            "Description": i.description,
            "Physical": i.physical_count,
            "System": i.system_count,
            "Difference": format_discrepancy(i.discrepancy),
            "Unit": i.unit_type,
            "Last updated": i.last_updated or "",
        }
        if cache is not None:
            row["Branch"] = cache.branch_name(i.branch_id)
        rows.append(row)
    return pd.DataFrame(rows)
