from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from coachmate.core.cache import cache_manager
from coachmate.core.database import build_engine, build_session_factory, get_db
from coachmate.core.performance_monitor import performance_metrics
from coachmate.main import app
from coachmate.models import Base, ClassModel, Subject, Teacher, TeacherSubject, Tenant


@pytest.fixture
async def engine(tmp_path):
    # file database so concurrent sessions get their own connections
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'scheduling.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def seed(session_factory):
    """Two institutes: the one under test and a foreign one for isolation checks."""
    async with session_factory() as db:
        tenant = Tenant(institute_code="ALPHA", institute_name="Alpha Coaching")
        other_tenant = Tenant(institute_code="BETA", institute_name="Beta Academy")
        db.add_all([tenant, other_tenant])
        await db.flush()

        class_a = ClassModel(tenant_id=tenant.id, class_name="Class A", section="A", academic_year="2026")
        class_b = ClassModel(tenant_id=tenant.id, class_name="Class B", section="B", academic_year="2026")
        math = Subject(tenant_id=tenant.id, subject_name="Mathematics", subject_code="MATH")
        physics = Subject(tenant_id=tenant.id, subject_name="Physics", subject_code="PHY")
        chemistry = Subject(tenant_id=tenant.id, subject_name="Chemistry", subject_code="CHEM")
        alice = Teacher(tenant_id=tenant.id, employee_id="T001", first_name="Alice", last_name="Rao",
                        email="alice@alpha.test")
        bob = Teacher(tenant_id=tenant.id, employee_id="T002", first_name="Bob", last_name="Sen",
                      email="bob@alpha.test")
        carol = Teacher(tenant_id=tenant.id, employee_id="T003", first_name="Carol", last_name="Das",
                        email="carol@alpha.test", is_active=False)

        foreign_class = ClassModel(tenant_id=other_tenant.id, class_name="Class A", section="A", academic_year="2026")
        foreign_subject = Subject(tenant_id=other_tenant.id, subject_name="Mathematics", subject_code="MATH")
        foreign_teacher = Teacher(tenant_id=other_tenant.id, employee_id="T001", first_name="Dev", last_name="Roy")

        db.add_all([
            class_a, class_b, math, physics, chemistry, alice, bob, carol,
            foreign_class, foreign_subject, foreign_teacher,
        ])
        await db.flush()

        db.add_all([
            TeacherSubject(tenant_id=tenant.id, teacher_id=alice.id, subject_id=math.id),
            TeacherSubject(tenant_id=tenant.id, teacher_id=alice.id, subject_id=physics.id),
            TeacherSubject(tenant_id=tenant.id, teacher_id=bob.id, subject_id=math.id),
            TeacherSubject(tenant_id=tenant.id, teacher_id=carol.id, subject_id=math.id),
            TeacherSubject(tenant_id=other_tenant.id, teacher_id=foreign_teacher.id, subject_id=foreign_subject.id),
        ])
        await db.commit()

    return SimpleNamespace(
        tenant=tenant,
        other_tenant=other_tenant,
        class_a=class_a,
        class_b=class_b,
        math=math,
        physics=physics,
        chemistry=chemistry,
        alice=alice,
        bob=bob,
        carol=carol,
        foreign_class=foreign_class,
        foreign_subject=foreign_subject,
        foreign_teacher=foreign_teacher,
    )


@pytest.fixture
async def db(session_factory, seed):
    async with session_factory() as session:
        yield session


@pytest.fixture
def slot_data(seed):
    """Builds a create payload for Alice teaching Mathematics to Class A on Monday 09:00-10:00."""
    def build(**overrides):
        data = {
            "class_id": seed.class_a.id,
            "subject_id": seed.math.id,
            "teacher_id": seed.alice.id,
            "day_of_week": "MONDAY",
            "start_time": "09:00",
            "end_time": "10:00",
            "room": "R-101",
            "is_primary": False,
        }
        data.update(overrides)
        return data

    return build


@pytest.fixture
async def client(session_factory, seed, monkeypatch):
    monkeypatch.setattr(cache_manager, "redis_url", None)
    performance_metrics.reset()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(seed):
    return {"X-Tenant-ID": str(seed.tenant.id), "X-User-Role": "ADMIN"}


@pytest.fixture
def teacher_headers(seed):
    return {"X-Tenant-ID": str(seed.tenant.id), "X-User-Role": "TEACHER"}
