"""
Daily totals of logged food items and how they compare with the
calculator's targets.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List

import pandas as pd

from core.nutrition_calc import MacroTargets

_LOG = logging.getLogger(__name__)

MACRO_KEYS = ["calories", "protein", "carbs", "fat"]


def daily_totals(entries: List[Dict[str, Any]]) -> pd.DataFrame:
    """Sum the four macro columns per calendar day (index = date)."""
    if not entries:
        return pd.DataFrame(columns=MACRO_KEYS, index=pd.Index([], name="date"))

    df = pd.DataFrame(entries)
    for col in MACRO_KEYS:
        if col not in df.columns:
            df[col] = 0.0
    df[MACRO_KEYS] = df[MACRO_KEYS].apply(pd.to_numeric, errors="coerce").fillna(0.0)
    df["date"] = pd.to_datetime(df["created_at"]).dt.date
    return df.groupby("date")[MACRO_KEYS].sum()


def progress_for_day(
    entries: List[Dict[str, Any]],
    targets: MacroTargets,
    day: date,
) -> Dict[str, Any]:
    totals = daily_totals(entries)
    consumed = (
        totals.loc[day].to_dict() if day in totals.index else {k: 0.0 for k in MACRO_KEYS}
    )
    goal = targets.as_dict()

    macros = {}
    for key in MACRO_KEYS:
        eaten = round(float(consumed[key]), 1)
        target = goal[key]
        macros[key] = {
            "consumed": eaten,
            "target": target,
            "remaining": round(target - eaten, 1),
            "percent": round(eaten / target * 100, 1) if target else 0.0,
        }
    _LOG.debug("progress %s: %s", day, macros)
    return {"date": day.isoformat(), "items": int(_count_for_day(entries, day)), "macros": macros}


def _count_for_day(entries: List[Dict[str, Any]], day: date) -> int:
    if not entries:
        return 0
    days = pd.to_datetime(pd.Series([e["created_at"] for e in entries])).dt.date
    return int((days == day).sum())
