"""CRUD operations for the per-user daily usage counter."""

from datetime import UTC, date, datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from models.usage import UserDailyUsage


def utc_today() -> date:
    return datetime.now(UTC).date()


async def get_daily_usage(
    db: AsyncSession, user_id: str, usage_date: date | None = None
) -> int:
    """Return today's generation count for the user (0 when no row exists)."""
    query = select(UserDailyUsage.usage_count).where(
        UserDailyUsage.user_id == user_id,
        UserDailyUsage.usage_date == (usage_date or utc_today()),
    )
    result = await db.execute(query)
    count = result.scalar_one_or_none()
    return int(count or 0)


async def increment_daily_usage(
    db: AsyncSession, user_id: str, usage_date: date | None = None
) -> int:
    """Atomically create-or-increment today's counter and return the new value.

    A single INSERT ... ON CONFLICT DO UPDATE statement, so concurrent
    requests from the same user never lose an update.
    """
    stmt = insert(UserDailyUsage).values(
        user_id=user_id,
        usage_date=usage_date or utc_today(),
        usage_count=1,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[UserDailyUsage.user_id, UserDailyUsage.usage_date],
        set_={
            "usage_count": UserDailyUsage.usage_count + 1,
            "updated_at": datetime.now(UTC),
        },
    ).returning(UserDailyUsage.usage_count)

    result = await db.execute(stmt)
    new_count = result.scalar_one()
    await db.commit()
    return int(new_count)
