from datetime import date
from decimal import Decimal

from sqlalchemy import select

from gymledger.api.v1.meritocracy import service
from gymledger.api.v1.meritocracy.calculations import modality_breakdown, most_used_role_and_rank, payroll_totals
from gymledger.core.ledger import PayrollRow
from gymledger.core.models import ClassAssignment, Modality
from gymledger.core.periods import MonthPeriod

from conftest import add_class, auth_headers

MARCH = MonthPeriod(year=2026, month=3)


def _row(class_id, attendance, hourly="100", multiplier="2", role="Professor", rank="Black belt", modality="Yoga"):
    return PayrollRow(
        teacher_id=1,
        class_id=class_id,
        date=date(2026, 3, class_id),
        start_time="07:00",
        capacity=20,
        attendance=attendance,
        modality=modality,
        role_name=role,
        hourly_rate=Decimal(hourly),
        rank_name=rank,
        multiplier=Decimal(multiplier),
    )


def test_three_classes_pay_three_hourly_rates():
    totals = payroll_totals([_row(1, 0), _row(2, 0), _row(3, 0)])
    assert totals.role_value == Decimal("300")
    assert totals.rank_value == 0
    assert totals.total_earnings == Decimal("300")


def test_rank_value_uses_each_assignment_multiplier():
    totals = payroll_totals([_row(1, 10, multiplier="2"), _row(2, 10, multiplier="1.5")])
    assert totals.rank_value == Decimal("35")
    assert totals.occupancy == 50
    assert totals.average_attendance == Decimal("10")


def test_most_used_role_and_rank():
    rows = [_row(1, 0), _row(2, 0, rank="White belt"), _row(3, 0, rank="White belt")]
    assert most_used_role_and_rank(rows) == ("Professor", "White belt")
    assert most_used_role_and_rank([]) == (None, None)


async def test_teacher_payroll_is_exact(db_session, ledger):
    detail = await service.get_teacher_payroll(db_session, ledger.teacher_a, MARCH)

    assert detail.total_classes == 4
    assert detail.total_attendance == 35
    assert detail.role_value == Decimal("400.00")
    # 10*2 + 0*2 + 5*2 + 20*2
    assert detail.rank_value == Decimal("70.00")
    assert detail.total_earnings == Decimal("470.00")
    assert detail.role == "Professor"
    assert detail.rank == "Black belt"
    assert [line.class_value for line in detail.classes] == [
        Decimal("20.00"),
        Decimal("40.00"),
        Decimal("0.00"),
        Decimal("10.00"),
    ]


async def test_changing_one_rank_moves_only_that_class_share(db_session, ledger):
    before = await service.get_teacher_payroll(db_session, ledger.teacher_a, MARCH)

    result = await db_session.execute(
        select(ClassAssignment).where(
            ClassAssignment.class_id == ledger.mon_16,
            ClassAssignment.teacher_id == ledger.teacher_a,
        )
    )
    assignment = result.scalar_one()
    assignment.rank_id = ledger.white_id
    await db_session.commit()

    after = await service.get_teacher_payroll(db_session, ledger.teacher_a, MARCH)
    # Attendance 5 on that class: 5*2 -> 5*1
    assert before.rank_value - after.rank_value == Decimal("5.00")
    assert after.role_value == before.role_value


async def test_payroll_list_sorted_by_earnings(db_session, ledger, admin):
    summaries = await service.list_teacher_payroll(db_session, MARCH)
    # The admin is not a professor and is not listed
    assert [s.name for s in summaries] == ["Ana", "Bruno"]
    assert summaries[0].total_earnings == Decimal("470.00")
    assert summaries[1].total_earnings == Decimal("70.00")
    assert summaries[1].occupancy == 100


async def test_teacher_without_classes_gets_zeroes(db_session, ledger):
    detail = await service.get_teacher_payroll(db_session, ledger.teacher_b, MonthPeriod(year=2026, month=2))
    assert detail.total_classes == 0
    assert detail.total_earnings == Decimal("0.00")
    assert detail.classes == []


async def test_professor_can_read_own_payroll_only(client, ledger):
    own = await client.get(
        f"/api/v1/meritocracia/professor/{ledger.teacher_a}",
        params={"mesAno": "03/2026"},
        headers=auth_headers(ledger.teacher_a),
    )
    assert own.status_code == 200
    assert Decimal(own.json()["total_earnings"]) == Decimal("470")

    other = await client.get(
        f"/api/v1/meritocracia/professor/{ledger.teacher_b}",
        params={"mesAno": "03/2026"},
        headers=auth_headers(ledger.teacher_a),
    )
    assert other.status_code == 403


async def test_payroll_list_requires_admin(client, admin, ledger):
    forbidden = await client.get("/api/v1/meritocracia/professores", headers=auth_headers(ledger.teacher_a))
    assert forbidden.status_code == 403

    response = await client.get(
        "/api/v1/meritocracia/professores",
        params={"mesAno": "03/2026"},
        headers=admin.headers,
    )
    assert response.status_code == 200
    assert [t["name"] for t in response.json()] == ["Ana", "Bruno"]


async def test_unknown_teacher_payroll(client, admin):
    response = await client.get("/api/v1/meritocracia/professor/999", headers=admin.headers)
    assert response.status_code == 404


def test_modality_breakdown_keeps_first_seen_order():
    rows = [_row(1, 10), _row(2, 4, hourly="50", multiplier="1", modality="Pilates"), _row(3, 5)]
    yoga, pilates = modality_breakdown(rows)
    assert yoga.name == "Yoga"
    assert yoga.total_classes == 2
    assert yoga.average_attendance == Decimal("7.50")
    # 2 * 100 + 15 * 2
    assert yoga.total_value == Decimal("230.00")
    assert pilates.total_value == Decimal("54.00")
    assert pilates.occupancy == 20
    assert modality_breakdown([]) == []


async def _add_pilates_class(db_session, ledger) -> int:
    pilates = Modality(name="Pilates")
    db_session.add(pilates)
    await db_session.commit()
    return await add_class(
        db_session,
        pilates.id,
        date(2026, 3, 4),
        "19:30",
        8,
        [(ledger.teacher_a, ledger.intern_role_id, ledger.white_id)],
        capacity=10,
    )


async def test_teacher_analysis_breaks_down_by_modality(db_session, ledger):
    await _add_pilates_class(db_session, ledger)
    analysis = await service.get_teacher_analysis(db_session, ledger.teacher_a, MARCH)

    assert analysis.total_classes == 5
    assert analysis.total_earnings == Decimal("528.00")
    assert [m.name for m in analysis.modalities] == ["Yoga", "Pilates"]
    yoga, pilates = analysis.modalities
    assert yoga.total_classes == 4
    assert yoga.total_attendance == 35
    assert yoga.average_attendance == Decimal("8.75")
    assert yoga.occupancy == 44
    assert yoga.total_value == Decimal("470.00")
    assert pilates.total_attendance == 8
    assert pilates.occupancy == 80
    # hourly 50 + 8 * 1
    assert pilates.total_value == Decimal("58.00")
    assert sum(m.total_value for m in analysis.modalities) == analysis.total_earnings


async def test_analysis_endpoints_require_admin(client, admin, ledger):
    forbidden = await client.get("/api/v1/analise-professores", headers=auth_headers(ledger.teacher_a))
    assert forbidden.status_code == 403

    listing = await client.get("/api/v1/analise-professores", params={"mesAno": "03/2026"}, headers=admin.headers)
    assert listing.status_code == 200
    assert [t["name"] for t in listing.json()] == ["Ana", "Bruno"]

    detail = await client.get(
        f"/api/v1/analise-professores/detalhe/{ledger.teacher_b}",
        params={"mesAno": "03/2026"},
        headers=admin.headers,
    )
    assert detail.status_code == 200
    body = detail.json()
    assert [m["name"] for m in body["modalities"]] == ["Yoga"]
    assert Decimal(body["total_earnings"]) == Decimal("70")

    missing = await client.get("/api/v1/analise-professores/detalhe/999", headers=admin.headers)
    assert missing.status_code == 404


async def test_teacher_profile_and_classes(client, ledger):
    headers = auth_headers(ledger.teacher_a)
    profile = await client.get(f"/api/v1/professores/{ledger.teacher_a}", params={"mesAno": "03/2026"}, headers=headers)
    assert profile.status_code == 200
    assert profile.json()["total_classes"] == 4
    assert profile.json()["role"] == "Professor"
    assert Decimal(profile.json()["total_earnings"]) == Decimal("470")

    classes = await client.get(
        f"/api/v1/professores/{ledger.teacher_a}/aulas",
        params={"mesAno": "03/2026"},
        headers=headers,
    )
    assert classes.status_code == 200
    assert [Decimal(c["total_value"]) for c in classes.json()] == [
        Decimal("120"),
        Decimal("140"),
        Decimal("100"),
        Decimal("110"),
    ]

    other = await client.get(f"/api/v1/professores/{ledger.teacher_b}/aulas", headers=headers)
    assert other.status_code == 403
