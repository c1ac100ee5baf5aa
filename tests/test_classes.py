from datetime import date, timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from gymledger.api.v1.classes import service
from gymledger.api.v1.classes.schemas import ClassSeriesCreate
from gymledger.core.models import ClassAssignment, ClassSession

from conftest import add_class, auth_headers


def _teachers(ledger):
    return [{"teacher_id": ledger.teacher_a, "role_id": ledger.professor_role_id, "rank_id": ledger.black_id}]


def _class_payload(ledger, **overrides):
    payload = {
        "modality_id": ledger.yoga_id,
        "date": "2026-04-06",
        "start_time": "7:30",
        "capacity": 15,
        "teachers": _teachers(ledger),
    }
    payload.update(overrides)
    return payload


async def test_create_class(client, admin, ledger):
    response = await client.post("/api/v1/aulas", json=_class_payload(ledger), headers=admin.headers)
    assert response.status_code == 201
    body = response.json()
    assert body["start_time"] == "07:30"
    assert body["weekday"] == "Monday"
    assert body["attendance"] == 0
    assert body["modality"] == "Yoga"
    assert body["teachers"][0]["name"] == "Ana"
    assert body["teachers"][0]["rank"] == "Black belt"


async def test_create_class_validation(client, admin, ledger):
    for overrides in ({"capacity": 0}, {"start_time": "25:00"}, {"teachers": []}):
        response = await client.post("/api/v1/aulas", json=_class_payload(ledger, **overrides), headers=admin.headers)
        assert response.status_code == 422, overrides


async def test_create_class_with_unknown_teacher(client, admin, ledger):
    teachers = [{"teacher_id": 999, "role_id": ledger.professor_role_id, "rank_id": ledger.black_id}]
    response = await client.post("/api/v1/aulas", json=_class_payload(ledger, teachers=teachers), headers=admin.headers)
    assert response.status_code == 400


async def test_professor_cannot_schedule(client, ledger):
    response = await client.post(
        "/api/v1/aulas",
        json=_class_payload(ledger),
        headers=auth_headers(ledger.teacher_a),
    )
    assert response.status_code == 403


async def test_create_series_skips_existing_dates(client, admin, ledger):
    payload = {
        "modality_id": ledger.yoga_id,
        "start_date": "2026-04-06",
        "end_date": "2026-04-19",
        "weekdays": [0, 2],
        "start_time": "06:00",
        "capacity": 10,
        "teachers": _teachers(ledger),
    }
    response = await client.post("/api/v1/aulas/serie", json=payload, headers=admin.headers)
    assert response.status_code == 201
    body = response.json()
    assert body["total_created"] == 4
    assert [c["date"] for c in body["classes"]] == ["2026-04-06", "2026-04-08", "2026-04-13", "2026-04-15"]
    assert body["warning"] is None

    again = await client.post("/api/v1/aulas/serie", json=payload, headers=admin.headers)
    assert again.status_code == 400


async def test_series_rejects_inverted_range(client, admin, ledger):
    payload = {
        "modality_id": ledger.yoga_id,
        "start_date": "2026-04-19",
        "end_date": "2026-04-06",
        "weekdays": [0],
        "start_time": "06:00",
        "capacity": 10,
        "teachers": _teachers(ledger),
    }
    response = await client.post("/api/v1/aulas/serie", json=payload, headers=admin.headers)
    assert response.status_code == 422


async def test_series_partial_failure_returns_warning(db_session, ledger, monkeypatch):
    original = service._slot_taken

    async def flaky_slot_taken(db, modality_id, day, start_time):
        if day == date(2026, 4, 8):
            raise SQLAlchemyError("deadlock detected")
        return await original(db, modality_id, day, start_time)

    monkeypatch.setattr(service, "_slot_taken", flaky_slot_taken)
    payload = ClassSeriesCreate(
        modality_id=ledger.yoga_id,
        start_date=date(2026, 4, 6),
        end_date=date(2026, 4, 15),
        weekdays=[0, 2],
        start_time="06:00",
        capacity=10,
        teachers=_teachers(ledger),
    )
    result = await service.create_class_series(db_session, payload, batch_size=2, pause_seconds=0)

    assert result.total_created == 3
    assert result.failed_dates == [date(2026, 4, 8)]
    assert result.warning is not None


def test_series_dates():
    dates = service.series_dates(date(2026, 3, 1), date(2026, 3, 10), [0, 6])
    assert dates == [date(2026, 3, 1), date(2026, 3, 2), date(2026, 3, 8), date(2026, 3, 9)]


async def test_list_classes_filters(client, admin, ledger):
    response = await client.get(
        "/api/v1/aulas",
        params={"data_inicio": "2026-03-01", "data_fim": "2026-03-31", "dia_semana": 0},
        headers=admin.headers,
    )
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [ledger.mon_2, ledger.mon_9, ledger.mon_16]

    by_teacher = await client.get("/api/v1/aulas", params={"busca": "brun"}, headers=admin.headers)
    assert [c["id"] for c in by_teacher.json()] == [ledger.tue_3]


async def test_classes_available_for_check_in(client, db_session, ledger):
    today = date.today()
    soon = await add_class(
        db_session, ledger.yoga_id, today + timedelta(days=2), "10:00", 0,
        [(ledger.teacher_a, ledger.professor_role_id, ledger.black_id)],
    )
    later = await add_class(
        db_session, ledger.yoga_id, today + timedelta(days=30), "10:00", 0,
        [(ledger.teacher_a, ledger.professor_role_id, ledger.black_id)],
    )
    response = await client.get("/api/v1/aulas/disponiveis-checkin", headers=auth_headers(ledger.teacher_a))
    assert response.status_code == 200
    ids = [c["id"] for c in response.json()]
    assert soon in ids
    assert later not in ids


async def test_classes_with_attendance_for_professor(client, ledger):
    response = await client.get("/api/v1/aulas/com-presenca", headers=auth_headers(ledger.teacher_b))
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [ledger.tue_3]


async def test_class_teachers(client, ledger):
    response = await client.get(f"/api/v1/aulas/{ledger.tue_3}/professores", headers=auth_headers(ledger.teacher_a))
    assert response.status_code == 200
    assert [t["name"] for t in response.json()] == ["Ana", "Bruno"]

    missing = await client.get("/api/v1/aulas/999/professores", headers=auth_headers(ledger.teacher_a))
    assert missing.status_code == 404


async def test_update_replaces_assignments(client, db_session, admin, ledger):
    teachers = [{"teacher_id": ledger.teacher_b, "role_id": ledger.intern_role_id, "rank_id": ledger.white_id}]
    response = await client.patch(
        f"/api/v1/aulas/{ledger.tue_3}",
        json={"capacity": 25, "teachers": teachers},
        headers=admin.headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["capacity"] == 25
    assert [t["name"] for t in body["teachers"]] == ["Bruno"]

    count = await db_session.execute(
        select(func.count(ClassAssignment.id)).where(ClassAssignment.class_id == ledger.tue_3)
    )
    assert count.scalar_one() == 1


async def test_delete_class_cascades(client, db_session, admin, ledger):
    response = await client.delete(f"/api/v1/aulas/{ledger.tue_3}", headers=admin.headers)
    assert response.status_code == 204

    remaining = await db_session.execute(
        select(func.count(ClassAssignment.id)).where(ClassAssignment.class_id == ledger.tue_3)
    )
    assert remaining.scalar_one() == 0
    assert await db_session.get(ClassSession, ledger.tue_3) is None


async def test_check_in(client, ledger):
    headers = auth_headers(ledger.teacher_a)
    response = await client.post("/api/v1/checkin", json={"class_id": ledger.mon_9, "attendance": 12}, headers=headers)
    assert response.status_code == 200
    assert response.json()["attendance"] == 12


async def test_check_in_above_capacity(client, ledger):
    response = await client.post(
        "/api/v1/checkin",
        json={"class_id": ledger.mon_9, "attendance": 21},
        headers=auth_headers(ledger.teacher_a),
    )
    assert response.status_code == 400


async def test_check_in_unknown_class(client, ledger):
    response = await client.post(
        "/api/v1/checkin",
        json={"class_id": 999, "attendance": 1},
        headers=auth_headers(ledger.teacher_a),
    )
    assert response.status_code == 404
