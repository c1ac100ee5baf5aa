"""
Seed script: create the tables, the live fixed values row and the first admin.

Run once with env set:
  ADMIN_EMAIL=admin@studio.com
  ADMIN_PASSWORD=YourSecurePassword

  python -m gymledger.db.seed

Creates (each only if missing):
- every table declared on Base
- fixed_values: one row with the configured defaults (28.00 per student, 78.00 per class)
- teachers: one admin with ADMIN_EMAIL / ADMIN_PASSWORD (skipped when either is unset)
"""
import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

import gymledger.core.models  # noqa: F401  (registers every table on Base)
from gymledger.auth.models import Teacher
from gymledger.auth.security import hash_password
from gymledger.core.config import settings
from gymledger.core.enums import TeacherRole
from gymledger.core.logging_config import setup_logging
from gymledger.core.models import FixedValues
from gymledger.db.session import AsyncSessionLocal, Base, engine

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_NAME = "Administrador"


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ensured.")


async def seed_fixed_values(db: AsyncSession) -> None:
    count = (await db.execute(select(func.count(FixedValues.id)))).scalar_one()
    if count:
        logger.info("Fixed values already present.")
        return
    db.add(
        FixedValues(
            revenue_per_student=settings.default_revenue_per_student,
            fixed_cost_per_class=settings.default_fixed_cost_per_class,
        )
    )
    await db.flush()
    logger.info(
        "Created fixed values: %s per student, %s per class.",
        settings.default_revenue_per_student,
        settings.default_fixed_cost_per_class,
    )


async def seed_admin(db: AsyncSession) -> None:
    email = (settings.admin_email or "").strip().lower()
    password = settings.admin_password
    if not email or not password:
        logger.info("No ADMIN_EMAIL/ADMIN_PASSWORD; skipping admin user.")
        return

    result = await db.execute(select(Teacher).where(func.lower(Teacher.email) == email))
    admin = result.scalar_one_or_none()
    if not admin:
        db.add(
            Teacher(
                name=DEFAULT_ADMIN_NAME,
                email=email,
                password_hash=hash_password(password),
                role=TeacherRole.ADMIN.value,
            )
        )
        await db.flush()
        logger.info("Created admin user: %s", email)
    else:
        admin.role = TeacherRole.ADMIN.value
        admin.password_hash = hash_password(password)
        logger.info("Updated existing teacher to admin: %s", email)


async def main() -> None:
    setup_logging()
    await create_tables()
    async with AsyncSessionLocal() as db:
        try:
            await seed_fixed_values(db)
            await seed_admin(db)
            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception("Seed failed")
            raise
    logger.info("Seed done.")


if __name__ == "__main__":
    asyncio.run(main())
