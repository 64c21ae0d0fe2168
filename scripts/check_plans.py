"""
scripts/check_plans.py
────────────────────────────────────────────────────────────────────────
Stored nutrition plans carry a snapshot of the targets they were built
on.  This job recomputes targets from each owner's current profile and
reports – or deactivates – plans whose snapshot no longer matches.

    python -m scripts.check_plans                 # report only
    python -m scripts.check_plans --user abc-123  # one user
    python -m scripts.check_plans --deactivate    # retire stale plans
"""
from __future__ import annotations

import asyncio
from argparse import ArgumentParser

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.errors import UnsafeTargetError, ValidationError
from core.nutrition_calc import NutritionalCalculator
from core.plan_builder import is_plan_stale
from services.db import AIPlan, load_profile_snapshot, session_scope

calc = NutritionalCalculator(floor_kcal=settings.calorie_floor_kcal)


async def check_user(db: AsyncSession, user_id: str, deactivate: bool = False) -> list[int]:
    """Return ids of this user's stale active plans."""
    plans = (
        await db.execute(
            select(AIPlan).where(
                AIPlan.user_id == user_id,
                AIPlan.is_active.is_(True),
                AIPlan.plan_type.in_(("nutrition", "combined")),
            )
        )
    ).scalars().all()
    if not plans:
        return []

    snapshot = await load_profile_snapshot(db, user_id)
    try:
        fresh = calc.targets_from_payload(snapshot.to_payload())
    except (ValidationError, UnsafeTargetError) as e:
        print(f"· skip {user_id} – cannot compute targets: {e}")
        return []

    stale = [p for p in plans if is_plan_stale(p.plan_data, fresh)]
    for p in stale:
        print(f"  ! plan {p.id} ({p.plan_type}) built on {p.plan_data.get('targets')} now {fresh.as_dict()}")
        if deactivate:
            p.is_active = False
    if stale and deactivate:
        await db.commit()
    return [p.id for p in stale]


async def _async_main() -> None:
    ap = ArgumentParser()
    ap.add_argument("--user", help="check only this user-id")
    ap.add_argument("--deactivate", action="store_true", help="deactivate stale plans")
    args = ap.parse_args()

    async with session_scope() as db:
        if args.user:
            ids = [args.user]
        else:
            ids = (
                await db.execute(select(AIPlan.user_id).where(AIPlan.is_active.is_(True)).distinct())
            ).scalars().all()

        total = 0
        for uid in ids:
            total += len(await check_user(db, uid, deactivate=args.deactivate))
    print(f"✓ checked {len(ids)} users, {total} stale plans")


if __name__ == "__main__":  # pragma: no cover
    asyncio.run(_async_main())
