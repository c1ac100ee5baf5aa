import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("SERIES_BATCH_PAUSE_SECONDS", "0")

from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from typing import AsyncGenerator, Dict, Optional, Sequence, Tuple

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gymledger.auth.security import create_access_token, hash_password
from gymledger.core.models import ClassAssignment, ClassSession, Modality, Rank, Role, Teacher
from gymledger.db.session import Base, get_db
from gymledger.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "secret123"


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test, shared with the app through get_db."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def create_teacher(
    db: AsyncSession,
    name: str,
    email: Optional[str] = None,
    role: str = "professor",
    password: str = TEST_PASSWORD,
) -> int:
    t = Teacher(name=name, email=email, password_hash=hash_password(password), role=role)
    db.add(t)
    await db.commit()
    return t.id


def auth_headers(teacher_id: int, role: str = "professor") -> Dict[str, str]:
    token = create_access_token(subject={"sub": str(teacher_id), "teacher_id": str(teacher_id), "role": role})
    return {"Authorization": f"Bearer {token}"}


async def add_class(
    db: AsyncSession,
    modality_id: int,
    day: date,
    start_time: str,
    attendance: int,
    assignments: Sequence[Tuple[int, int, int]],
    capacity: int = 20,
) -> int:
    """assignments: (teacher_id, role_id, rank_id) tuples."""
    c = ClassSession(
        modality_id=modality_id,
        date=day,
        start_time=start_time,
        capacity=capacity,
        attendance=attendance,
        assignments=[ClassAssignment(teacher_id=t, role_id=r, rank_id=k) for t, r, k in assignments],
    )
    db.add(c)
    await db.commit()
    return c.id


@pytest.fixture()
async def admin(db_session: AsyncSession) -> SimpleNamespace:
    teacher_id = await create_teacher(db_session, "Admin", "admin@studio.com", role="admin")
    return SimpleNamespace(id=teacher_id, headers=auth_headers(teacher_id, "admin"))


@pytest.fixture()
async def ledger(db_session: AsyncSession) -> SimpleNamespace:
    """
    Reference data plus the March 2026 ledger (default rates 28 / 78):

    Yoga Monday 07:00, teacher A as Professor (100) / Black belt (x2):
      2026-03-02 att 10, 2026-03-09 att 0, 2026-03-16 att 5
    Yoga Tuesday 18:00, A as Professor / Black belt and B as Intern (50) / White belt (x1):
      2026-03-03 att 20
    February 2026: Yoga Monday 07:00 on 2026-02-02 att 10 with A.
    """
    db = db_session
    yoga = Modality(name="Yoga")
    professor_role = Role(name="Professor", hourly_rate=Decimal("100.00"))
    intern_role = Role(name="Intern", hourly_rate=Decimal("50.00"))
    black = Rank(name="Black belt", multiplier=Decimal("2.00"))
    white = Rank(name="White belt", multiplier=Decimal("1.00"))
    db.add_all([yoga, professor_role, intern_role, black, white])
    await db.commit()

    ns = SimpleNamespace(
        yoga_id=yoga.id,
        professor_role_id=professor_role.id,
        intern_role_id=intern_role.id,
        black_id=black.id,
        white_id=white.id,
    )
    ns.teacher_a = await create_teacher(db, "Ana", "ana@studio.com")
    ns.teacher_b = await create_teacher(db, "Bruno", "bruno@studio.com")

    a_main = (ns.teacher_a, ns.professor_role_id, ns.black_id)
    b_intern = (ns.teacher_b, ns.intern_role_id, ns.white_id)
    ns.mon_2 = await add_class(db, ns.yoga_id, date(2026, 3, 2), "07:00", 10, [a_main])
    ns.mon_9 = await add_class(db, ns.yoga_id, date(2026, 3, 9), "07:00", 0, [a_main])
    ns.mon_16 = await add_class(db, ns.yoga_id, date(2026, 3, 16), "07:00", 5, [a_main])
    ns.tue_3 = await add_class(db, ns.yoga_id, date(2026, 3, 3), "18:00", 20, [a_main, b_intern])
    ns.feb_2 = await add_class(db, ns.yoga_id, date(2026, 2, 2), "07:00", 10, [a_main])
    return ns
