# tests/api/test_payouts_api.py

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from payout_service.models.payout import Payout
from tests.utils.auth import get_user_authentication_headers
from tests.utils.factories import make_admin, make_event, make_order, make_organizer, make_payout


def _organizer_headers(organizer):
    return get_user_authentication_headers(
        organizer.id, sub_role="ORGANIZER", name=organizer.name, email=organizer.email
    )


def _admin_headers(admin):
    return get_user_authentication_headers(admin.id, role="ADMIN", name=admin.name, email=admin.email)


def _recent_sale(db, organizer, total_amount):
    event = make_event(db, owner=organizer)
    return make_order(
        db,
        event=event,
        total_amount=total_amount,
        created_at=datetime.now(timezone.utc) - timedelta(days=1),
    )


def test_request_payout(test_client, db):
    organizer = make_organizer(db)
    _recent_sale(db, organizer, 20000)

    response = test_client.post("/api/v1/payouts/request", headers=_organizer_headers(organizer))

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["organizer_id"] == organizer.id
    assert Decimal(data["net_amount"]) == Decimal("19000")
    assert Decimal(data["platform_fee"]) == Decimal("1000")


def test_request_payout_requires_token(test_client):
    response = test_client.post("/api/v1/payouts/request")
    assert response.status_code == 401


def test_request_payout_rejects_bad_token(test_client):
    response = test_client.post(
        "/api/v1/payouts/request", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


def test_request_payout_as_attendee_is_forbidden(test_client, db):
    organizer = make_organizer(db)
    headers = get_user_authentication_headers(organizer.id, sub_role="ATTENDEE")

    response = test_client.post("/api/v1/payouts/request", headers=headers)

    assert response.status_code == 403
    assert response.json()["detail"] == "Only organizers can request payouts"


def test_request_payout_without_bank_details(test_client, db):
    organizer = make_organizer(db, with_bank=False)
    _recent_sale(db, organizer, 1000)

    response = test_client.post("/api/v1/payouts/request", headers=_organizer_headers(organizer))

    assert response.status_code == 422
    assert response.json()["detail"] == "Please add your bank details before requesting a payout"


def test_request_payout_without_funds(test_client, db):
    organizer = make_organizer(db)

    response = test_client.post("/api/v1/payouts/request", headers=_organizer_headers(organizer))

    assert response.status_code == 422
    assert response.json()["detail"] == "No funds available for payout"


def test_second_request_conflicts(test_client, db):
    organizer = make_organizer(db)
    _recent_sale(db, organizer, 1000)
    headers = _organizer_headers(organizer)

    first = test_client.post("/api/v1/payouts/request", headers=headers)
    second = test_client.post("/api/v1/payouts/request", headers=headers)

    assert first.status_code == 201
    assert second.status_code == 409
    assert db.query(Payout).count() == 1


def test_list_my_payouts(test_client, db):
    organizer = make_organizer(db)
    make_payout(db, organizer=organizer)

    response = test_client.get("/api/v1/payouts/me", headers=_organizer_headers(organizer))

    assert response.status_code == 200
    assert len(response.json()) == 1


def test_my_revenue_analytics(test_client, db):
    organizer = make_organizer(db)
    _recent_sale(db, organizer, 2000)

    response = test_client.get(
        "/api/v1/payouts/me/analytics", headers=_organizer_headers(organizer)
    )

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["pending_payout"]["amount"]) == Decimal("1900")
    assert data["pending_payout"]["can_request"] is True
    assert len(data["recent_orders"]) == 1


def test_admin_list_payouts_with_status_filter(test_client, db):
    admin = make_admin(db)
    make_payout(db, organizer=make_organizer(db), status="PENDING")
    make_payout(db, organizer=make_organizer(db, name="Bola Ade"), status="COMPLETED")

    response = test_client.get(
        "/api/v1/admin/payouts", params={"status": "PENDING"}, headers=_admin_headers(admin)
    )

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["status"] == "PENDING"
    assert "organizer" in data[0]


def test_admin_list_payouts_forbidden_for_organizer(test_client, db):
    organizer = make_organizer(db)

    response = test_client.get("/api/v1/admin/payouts", headers=_organizer_headers(organizer))

    assert response.status_code == 403


def test_admin_approve_payout(test_client, db):
    admin = make_admin(db)
    payout = make_payout(db, organizer=make_organizer(db), status="PENDING")

    response = test_client.post(
        f"/api/v1/admin/payouts/{payout.id}/process",
        json={"approve": True, "notes": "Paid"},
        headers=_admin_headers(admin),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "COMPLETED"
    assert data["processed_by"] == admin.id


def test_admin_process_twice_conflicts(test_client, db):
    admin = make_admin(db)
    payout = make_payout(db, organizer=make_organizer(db), status="PENDING")
    url = f"/api/v1/admin/payouts/{payout.id}/process"

    test_client.post(url, json={"approve": False}, headers=_admin_headers(admin))
    response = test_client.post(url, json={"approve": True}, headers=_admin_headers(admin))

    assert response.status_code == 409
    assert response.json()["detail"] == "Payout has already been processed"


def test_admin_process_unknown_payout(test_client, db):
    admin = make_admin(db)

    response = test_client.post(
        "/api/v1/admin/payouts/po_missing/process",
        json={"approve": True},
        headers=_admin_headers(admin),
    )

    assert response.status_code == 404


def test_admin_get_payout_detail(test_client, db):
    admin = make_admin(db)
    payout = make_payout(db, organizer=make_organizer(db), status="PENDING")
    test_client.post(
        f"/api/v1/admin/payouts/{payout.id}/process",
        json={"approve": False, "notes": "Wrong account"},
        headers=_admin_headers(admin),
    )

    response = test_client.get(f"/api/v1/admin/payouts/{payout.id}", headers=_admin_headers(admin))

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "FAILED"
    assert data["failure_reason"] == "Wrong account"
    assert [entry["action"] for entry in data["audit_trail"]] == ["payout.rejected"]


def test_admin_bulk_process(test_client, db):
    admin = make_admin(db)
    payouts = [
        make_payout(db, organizer=make_organizer(db, name=f"Organizer {i}"), status="PENDING")
        for i in range(2)
    ]

    response = test_client.post(
        "/api/v1/admin/payouts/bulk-process",
        json={"payout_ids": [p.id for p in payouts] + ["po_missing"], "approve": True},
        headers=_admin_headers(admin),
    )

    assert response.status_code == 200
    assert response.json() == {
        "successful": 2,
        "failed": 1,
        "message": "Processed 2 payouts successfully, 1 failed",
    }


def test_admin_bulk_process_requires_ids(test_client, db):
    admin = make_admin(db)

    response = test_client.post(
        "/api/v1/admin/payouts/bulk-process",
        json={"payout_ids": [], "approve": True},
        headers=_admin_headers(admin),
    )

    assert response.status_code == 422


def test_health(test_client):
    response = test_client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
