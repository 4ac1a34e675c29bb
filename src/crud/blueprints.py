"""CRUD operations for the blueprint vault."""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.blueprints import SavedBlueprint
from schemas.blueprints import Blueprint


async def create_blueprint(
    db: AsyncSession,
    user_id: str,
    goal: str,
    mode: str,
    blueprint: Blueprint,
) -> SavedBlueprint:
    """Persist a blueprint for the user.

    Args:
        db: Database session
        user_id: Owner of the vault entry
        goal: The goal text the blueprint was generated for
        mode: Architect mode used for generation
        blueprint: Structured blueprint record

    Returns:
        Created SavedBlueprint instance
    """
    saved = SavedBlueprint(
        user_id=user_id,
        goal=goal,
        mode=mode,
        blueprint=blueprint.to_wire(),
    )
    db.add(saved)
    await db.commit()
    await db.refresh(saved)
    return saved


async def list_blueprints(
    db: AsyncSession, user_id: str, limit: int = 50
) -> list[SavedBlueprint]:
    """Newest-first vault entries for the user."""
    query = (
        select(SavedBlueprint)
        .where(SavedBlueprint.user_id == user_id)
        .order_by(SavedBlueprint.created_at.desc())
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_blueprint(db: AsyncSession, blueprint_id: UUID) -> SavedBlueprint | None:
    result = await db.execute(
        select(SavedBlueprint).where(SavedBlueprint.id == blueprint_id)
    )
    return result.scalar_one_or_none()


async def delete_blueprint(db: AsyncSession, blueprint_id: UUID, user_id: str) -> bool:
    """Delete a vault entry owned by the user.

    Returns:
        True if a row was deleted, False otherwise
    """
    result = await db.execute(
        delete(SavedBlueprint).where(
            SavedBlueprint.id == blueprint_id,
            SavedBlueprint.user_id == user_id,
        )
    )
    await db.commit()
    return bool(result.rowcount)
