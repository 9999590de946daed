from datetime import date, timedelta
import uuid

from dateutil.relativedelta import relativedelta

from tests.conftest import DOCTOR_HEADERS, RECEPTIONIST_HEADERS


def _payment_body(**overrides):
    body = {
        "appointmentId": str(uuid.uuid4()),
        "patientId": str(uuid.uuid4()),
        "amount": "200.00",
        "paymentMethod": "cash",
    }
    body.update(overrides)
    return body


async def test_cash_payment_defaults_to_fully_paid(client):
    response = await client.post("/api/v1/payments/", json=_payment_body())

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "paid"
    assert data["paidAmount"] == "200.00"
    assert data["outstandingAmount"] == "0.00"
    assert data["paymentDate"] == date.today().isoformat()
    assert data["installments"] == []


async def test_partial_cliq_payment(client):
    response = await client.post(
        "/api/v1/payments/",
        json=_payment_body(paymentMethod="cliq", paidAmount="50", notes="first visit"),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "partial"
    assert data["paidAmount"] == "50.00"
    assert data["outstandingAmount"] == "150.00"
    assert data["notes"] == "first visit"


async def test_paid_amount_above_total_is_rejected(client):
    response = await client.post("/api/v1/payments/", json=_payment_body(paidAmount="250.00"))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["code"] == "validation_error"


async def test_non_positive_amount_is_rejected(client):
    response = await client.post("/api/v1/payments/", json=_payment_body(amount="0"))

    assert response.status_code == 400


async def test_installment_payment_collects_first_installment_up_front(client):
    response = await client.post(
        "/api/v1/payments/",
        json=_payment_body(amount="100.00", paymentMethod="installment", installmentCount=3),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["paymentMethod"] == "installment"
    assert data["status"] == "partial"
    assert data["paidAmount"] == "33.33"

    installments = data["installments"]
    assert [item["amount"] for item in installments] == ["33.33", "33.33", "33.34"]
    assert [item["isPaid"] for item in installments] == [True, False, False]
    first_due = date.today() + relativedelta(months=1)
    assert installments[0]["dueDate"] == first_due.isoformat()
    assert installments[0]["paidDate"] == date.today().isoformat()


async def test_single_installment_payment_is_settled_immediately(client):
    response = await client.post(
        "/api/v1/payments/",
        json=_payment_body(amount="90.00", paymentMethod="installment", installmentCount=1),
    )

    data = response.json()
    assert data["status"] == "paid"
    assert data["paidAmount"] == "90.00"


async def test_installment_payment_requires_count(client):
    response = await client.post(
        "/api/v1/payments/", json=_payment_body(paymentMethod="installment")
    )

    assert response.status_code == 400


async def test_idempotency_key_returns_the_original_payment(client):
    body = _payment_body()
    headers = {"Idempotency-Key": "desk-42"}

    first = await client.post("/api/v1/payments/", json=body, headers=headers)
    second = await client.post("/api/v1/payments/", json=body, headers=headers)
    listing = await client.get("/api/v1/payments/")

    assert first.json()["id"] == second.json()["id"]
    assert listing.json()["meta"]["pagination"]["totalRecords"] == 1


async def test_list_payments_filters_and_paginates(client):
    patient_id = str(uuid.uuid4())
    for _ in range(3):
        await client.post("/api/v1/payments/", json=_payment_body(patientId=patient_id))
    await client.post("/api/v1/payments/", json=_payment_body(paidAmount="10"))

    response = await client.get(
        "/api/v1/payments/", params={"patientId": patient_id, "pageSize": 2}
    )
    partial = await client.get("/api/v1/payments/", params={"status": "partial"})

    body = response.json()
    assert body["success"] is True
    assert len(body["data"]) == 2
    assert body["meta"]["pagination"] == {
        "page": 1,
        "pageSize": 2,
        "totalRecords": 3,
        "totalPages": 2,
    }
    assert all(item["patientId"] == patient_id for item in body["data"])
    assert [item["status"] for item in partial.json()["data"]] == ["partial"]


async def test_get_payment_includes_installments(client):
    created = await client.post(
        "/api/v1/payments/",
        json=_payment_body(paymentMethod="installment", installmentCount=2),
    )

    response = await client.get(f"/api/v1/payments/{created.json()['id']}")

    assert response.status_code == 200
    assert len(response.json()["installments"]) == 2


async def test_unknown_payment_returns_not_found_envelope(client):
    response = await client.get(f"/api/v1/payments/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["errors"][0]["code"] == "payment_not_found"


async def test_update_notes_and_method(client):
    created = await client.post("/api/v1/payments/", json=_payment_body(notes="old"))
    payment_id = created.json()["id"]

    response = await client.patch(
        f"/api/v1/payments/{payment_id}", json={"paymentMethod": "cliq", "notes": "moved to cliq"}
    )

    assert response.status_code == 200
    assert response.json()["paymentMethod"] == "cliq"
    assert response.json()["notes"] == "moved to cliq"


async def test_installment_method_cannot_be_switched(client):
    created = await client.post(
        "/api/v1/payments/",
        json=_payment_body(paymentMethod="installment", installmentCount=2),
    )

    response = await client.patch(
        f"/api/v1/payments/{created.json()['id']}", json={"paymentMethod": "cash"}
    )

    assert response.status_code == 400


async def test_cancel_pending_balance_and_reject_cancelling_paid(client):
    partial = await client.post("/api/v1/payments/", json=_payment_body(paidAmount="20"))
    paid = await client.post("/api/v1/payments/", json=_payment_body())

    cancelled = await client.post(f"/api/v1/payments/{partial.json()['id']}/cancel")
    conflict = await client.post(f"/api/v1/payments/{paid.json()['id']}/cancel")

    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"
    assert conflict.status_code == 409


async def test_delete_payment_removes_schedule(client):
    created = await client.post(
        "/api/v1/payments/",
        json=_payment_body(paymentMethod="installment", installmentCount=3),
    )
    payment_id = created.json()["id"]

    response = await client.delete(f"/api/v1/payments/{payment_id}")
    missing = await client.get(f"/api/v1/payments/{payment_id}")
    rows = await client.get("/api/v1/installments/", params={"paymentId": payment_id})

    assert response.status_code == 204
    assert missing.status_code == 404
    assert rows.json()["data"] == []


async def test_receptionist_cannot_delete_payments(client):
    created = await client.post("/api/v1/payments/", json=_payment_body())

    response = await client.delete(
        f"/api/v1/payments/{created.json()['id']}", headers=RECEPTIONIST_HEADERS
    )

    assert response.status_code == 403
    assert response.json()["errors"][0]["code"] == "access_denied"


async def test_doctor_can_read_but_not_record(client):
    listing = await client.get("/api/v1/payments/", headers=DOCTOR_HEADERS)
    create = await client.post("/api/v1/payments/", json=_payment_body(), headers=DOCTOR_HEADERS)

    assert listing.status_code == 200
    assert create.status_code == 403


async def test_requests_without_gateway_headers_are_unauthorized(client):
    response = await client.get(
        "/api/v1/payments/", headers={"AuthStatus": "", "UserId": "", "UserType": ""}
    )

    assert response.status_code == 401


async def test_summary_totals_exclude_cancelled(client):
    await client.post("/api/v1/payments/", json=_payment_body(amount="100.00"))
    await client.post("/api/v1/payments/", json=_payment_body(amount="80.00", paidAmount="30"))
    cancelled = await client.post(
        "/api/v1/payments/", json=_payment_body(amount="500.00", paidAmount="100")
    )
    await client.post(f"/api/v1/payments/{cancelled.json()['id']}/cancel")

    response = await client.get("/api/v1/payments/summary")

    data = response.json()
    assert data["totalRevenue"] == "130.00"
    assert data["pendingAmount"] == "50.00"
    assert data["countByStatus"] == {"pending": 0, "partial": 1, "paid": 1, "cancelled": 1}


async def test_explicit_payment_date_is_kept(client):
    visit_day = date.today() - timedelta(days=3)
    response = await client.post(
        "/api/v1/payments/", json=_payment_body(paymentDate=visit_day.isoformat())
    )

    assert response.json()["paymentDate"] == visit_day.isoformat()


async def test_amount_too_large_to_store_is_rejected(client):
    response = await client.post("/api/v1/payments/", json=_payment_body(amount="1e30"))

    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "validation_error"


async def test_installment_count_above_ten_years_is_rejected(client):
    response = await client.post(
        "/api/v1/payments/",
        json=_payment_body(paymentMethod="installment", installmentCount=121),
    )

    assert response.status_code == 400


async def test_cancelling_twice_is_a_no_op(client):
    created = await client.post("/api/v1/payments/", json=_payment_body(paidAmount="20"))
    url = f"/api/v1/payments/{created.json()['id']}/cancel"

    await client.post(url)
    again = await client.post(url)

    assert again.status_code == 200
    assert again.json()["status"] == "cancelled"
