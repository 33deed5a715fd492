from decimal import Decimal

import pytest

from conftest import invoice_payload


@pytest.fixture
def customer_id(client):
    response = client.post("/api/customers", json={"name": "مؤسسة النور التجارية", "meterNumber": "CM-2041"})
    return response.json()["id"]


def _balance(client, customer_id):
    return Decimal(client.get(f"/api/customers/{customer_id}").json()["balance"])


def test_create_monthly_invoice(client, customer_id):
    payload = invoice_payload(customer_id, items=[
        {"description": "رسوم", "price": "100"},
        {"description": "خدمة", "price": "50"},
    ])
    payload["discountPercent"] = "10"

    response = client.post("/api/invoices", json=payload)

    assert response.status_code == 201, response.text
    invoice = response.json()
    assert invoice["number"] == "INV-2024-001"
    assert invoice["status"] == "pending"
    assert invoice["customer"]["id"] == customer_id
    assert Decimal(invoice["subtotal"]) == Decimal("150.00")
    assert Decimal(invoice["discount"]) == Decimal("15.00")
    assert Decimal(invoice["tax"]) == Decimal("0")
    assert Decimal(invoice["total"]) == Decimal("135.00")
    assert [item["description"] for item in invoice["items"]] == ["رسوم", "خدمة"]
    assert _balance(client, customer_id) == Decimal("135.00")


def test_submitted_totals_are_recomputed(client, customer_id):
    payload = invoice_payload(
        customer_id,
        items=[{"description": "عداد", "previousReading": "100", "currentReading": "150",
                "unitPrice": "2", "price": "5"}],
        type="commercial", subtotal="9999", total="9999",
    )

    invoice = client.post("/api/invoices", json=payload).json()

    assert Decimal(invoice["items"][0]["price"]) == Decimal("100.00")
    assert Decimal(invoice["items"][0]["total"]) == Decimal("100.00")
    assert Decimal(invoice["total"]) == Decimal("100.00")


def test_payment_creates_revenue_entry(client, customer_id):
    client.post("/api/invoices", json=invoice_payload(customer_id, items=[{"description": "a", "price": "50"}]))

    payload = invoice_payload(customer_id, items=[{"description": "دفعة", "price": "200"}], type="payment")
    payload["isPayment"] = True
    payload["discountPercent"] = "50"
    response = client.post("/api/invoices", json=payload)

    assert response.status_code == 201
    payment = response.json()
    assert payment["status"] == "paid"
    assert Decimal(payment["total"]) == Decimal("200.00")

    revenues = client.get("/api/invoices", params={"type": "revenue"}).json()
    assert len(revenues) == 1
    assert revenues[0]["status"] == "paid"
    assert revenues[0]["customerId"] == customer_id
    assert Decimal(revenues[0]["total"]) == Decimal("200.00")
    assert _balance(client, customer_id) == Decimal("0.00")


def test_duplicate_number_is_rejected(client, customer_id):
    payload = invoice_payload(customer_id, number="INV-2024-050")
    assert client.post("/api/invoices", json=payload).status_code == 201

    response = client.post("/api/invoices", json=payload)

    assert response.status_code == 400
    assert response.json() == {"detail": "Invoice number INV-2024-050 already exists"}
    assert _balance(client, customer_id) == Decimal("200.00")


def test_unknown_customer_is_rejected(client):
    response = client.post("/api/invoices", json=invoice_payload("missing"))
    assert response.status_code == 400
    assert response.json() == {"detail": "Customer does not exist"}


def test_invalid_invoice_body(client, customer_id):
    response = client.post("/api/invoices", json=invoice_payload(customer_id, items=[]))

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid invoice data"
    assert any(error["loc"][-1] == "items" for error in body["errors"])


def test_list_filters(client, customer_id):
    client.post("/api/invoices", json=invoice_payload(customer_id, status="paid"))
    client.post("/api/invoices", json=invoice_payload(customer_id, type="commercial",
                                                      items=[{"description": "x", "price": "5"}]))

    assert len(client.get("/api/invoices").json()) == 2
    assert len(client.get("/api/invoices", params={"status": "paid"}).json()) == 1
    assert len(client.get("/api/invoices", params={"type": "commercial"}).json()) == 1
    assert len(client.get("/api/invoices", params={"customerId": customer_id}).json()) == 2
    assert client.get("/api/invoices", params={"customerId": "other"}).json() == []
    assert client.get("/api/invoices", params={"status": "lost"}).status_code == 400


def test_get_invoice_and_items(client, customer_id):
    created = client.post("/api/invoices", json=invoice_payload(customer_id)).json()

    detail = client.get(f"/api/invoices/{created['id']}").json()
    assert detail["customer"]["name"] == "مؤسسة النور التجارية"

    items = client.get(f"/api/invoices/{created['id']}/items").json()
    assert len(items) == 1
    assert items[0]["invoiceId"] == created["id"]

    assert client.get("/api/invoices/nope").json() == {"detail": "Invoice not found"}
    assert client.get("/api/invoices/nope/items").status_code == 404


def test_update_invoice_header_only(client, customer_id):
    created = client.post("/api/invoices", json=invoice_payload(customer_id)).json()

    response = client.put(f"/api/invoices/{created['id']}", json={"status": "paid", "notes": "تم"})

    assert response.status_code == 200
    assert response.json()["status"] == "paid"
    assert response.json()["notes"] == "تم"
    assert _balance(client, customer_id) == Decimal("200.00")
    assert client.put("/api/invoices/nope", json={"status": "paid"}).status_code == 404


def test_update_to_taken_number_is_rejected(client, customer_id):
    client.post("/api/invoices", json=invoice_payload(customer_id, number="A-1"))
    second = client.post("/api/invoices", json=invoice_payload(customer_id, number="A-2")).json()

    response = client.put(f"/api/invoices/{second['id']}", json={"number": "A-1"})

    assert response.status_code == 400
    assert client.put(f"/api/invoices/{second['id']}", json={"number": "A-2"}).status_code == 200


def test_delete_invoice(client, customer_id):
    created = client.post("/api/invoices", json=invoice_payload(customer_id)).json()

    response = client.delete(f"/api/invoices/{created['id']}")

    assert response.json() == {"message": "Invoice deleted successfully"}
    assert client.get(f"/api/invoices/{created['id']}").status_code == 404
    assert client.delete(f"/api/invoices/{created['id']}").status_code == 404
    # balance is a running total and is not reversed
    assert _balance(client, customer_id) == Decimal("200.00")


def test_preview(client):
    response = client.post("/api/invoices/preview", json={
        "type": "commercial",
        "discountPercent": "10",
        "items": [
            {"previousReading": "100", "currentReading": "150", "unitPrice": "2"},
            {"previousReading": "150", "currentReading": "100", "unitPrice": "2", "price": "1,000"},
            {"price": "abc"},
        ],
    })

    assert response.status_code == 200
    body = response.json()
    assert [Decimal(item["lineTotal"]) for item in body["items"]] == [Decimal("100"), Decimal("1000"), Decimal("0")]
    assert Decimal(body["subtotal"]) == Decimal("1100.00")
    assert Decimal(body["discountAmount"]) == Decimal("110.00")
    assert Decimal(body["total"]) == Decimal("990.00")


def test_preview_payment_ignores_discount(client):
    body = client.post("/api/invoices/preview", json={
        "type": "payment", "discountPercent": "25", "items": [{"price": "80"}],
    }).json()

    assert Decimal(body["discountAmount"]) == Decimal("0")
    assert Decimal(body["total"]) == Decimal("80.00")


def test_invoice_pdf(client, customer_id):
    created = client.post("/api/invoices", json=invoice_payload(customer_id, number="INV-2024-007")).json()

    response = client.get(f"/api/invoices/{created['id']}/pdf", params={"currency": "USD"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="invoice-INV-2024-007.pdf"'
    assert response.content.startswith(b"%PDF")


def test_preview_with_huge_numbers(client):
    response = client.post("/api/invoices/preview", json={
        "type": "commercial",
        "discountPercent": "1e40",
        "items": [{"price": "1e30"}, {"previousReading": "0", "currentReading": "1e30", "unitPrice": "2", "price": "5"}],
    })

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["subtotal"]) == Decimal("5.00")
    assert Decimal(body["total"]) == Decimal("5.00")


def test_amounts_beyond_column_size_are_rejected(client, customer_id):
    too_big = invoice_payload(customer_id, items=[{"description": "a", "price": "9" * 29}])
    response = client.post("/api/invoices", json=too_big)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid invoice data"

    too_precise = invoice_payload(customer_id, items=[{"description": "a", "price": "1.005"}])
    assert client.post("/api/invoices", json=too_precise).status_code == 400


def test_discount_percent_must_be_a_percentage(client, customer_id):
    payload = invoice_payload(customer_id)
    payload["discountPercent"] = "150"

    response = client.post("/api/invoices", json=payload)

    assert response.status_code == 400
    assert any(error["loc"][-1] == "discountPercent" for error in response.json()["errors"])


def test_discount_amount_larger_than_subtotal(client, customer_id):
    invoice = client.post("/api/invoices", json=invoice_payload(customer_id, discount="500")).json()

    assert Decimal(invoice["subtotal"]) == Decimal("200.00")
    assert Decimal(invoice["discount"]) == Decimal("200.00")
    assert Decimal(invoice["total"]) == Decimal("0.00")
    assert _balance(client, customer_id) == Decimal("0.00")


def test_update_ignores_amounts(client, customer_id):
    created = client.post("/api/invoices", json=invoice_payload(customer_id)).json()

    response = client.put(f"/api/invoices/{created['id']}", json={
        "total": "999", "subtotal": "1", "tax": "5", "discount": "3", "notes": "مراجعة",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["notes"] == "مراجعة"
    assert Decimal(body["subtotal"]) == Decimal("200.00")
    assert Decimal(body["discount"]) == Decimal("0.00")
    assert Decimal(body["tax"]) == Decimal("0.00")
    assert Decimal(body["total"]) == Decimal("200.00")
    assert Decimal(body["total"]) == Decimal(body["subtotal"]) - Decimal(body["discount"])
