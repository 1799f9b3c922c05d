"""
Integration tests for the purchase/sales order endpoints and the status machine API.
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from main import app
from utils.auth_utils import get_permission_matrix


def _po_body(vendor, product, **overrides):
    body = {
        "vendor_id": vendor.id,
        "order_date": "2026-03-15",
        "items": [
            {"product_id": product.id, "quantity": "2", "unit_price": "100", "tax_amount": "20", "discount_amount": "0"},
        ],
    }
    body.update(overrides)
    return body


@pytest.mark.integration
class TestPurchaseOrderEndpoints:

    def test_create_returns_draft_with_totals(self, client, admin_headers, vendor, product):
        response = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "DRAFT"
        assert data["po_number"] == "PO-202603-0001"
        assert Decimal(data["total_amount"]) == Decimal("220.00")
        assert len(data["items"]) == 1
        assert Decimal(data["items"][0]["total_amount"]) == Decimal("220.00")

    def test_customer_cannot_be_used_as_vendor(self, client, admin_headers, customer, product):
        response = client.post("/purchase-orders/", json=_po_body(customer, product), headers=admin_headers)
        assert response.status_code == 400
        assert "not a vendor" in response.json()["detail"]

    def test_status_filter_and_lookup(self, client, admin_headers, vendor, product):
        created = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()
        client.post("/purchase-orders/", json=_po_body(vendor, product, items=[]), headers=admin_headers)
        client.put(f"/orders/purchase/{created['id']}/status", json={"status": "CONFIRMED"}, headers=admin_headers)

        confirmed = client.get("/purchase-orders/?status=CONFIRMED", headers=admin_headers).json()
        assert [o["id"] for o in confirmed] == [created["id"]]
        assert client.get(f"/purchase-orders/{created['id']}", headers=admin_headers).json()["status"] == "CONFIRMED"

    def test_only_draft_orders_can_be_deleted(self, client, admin_headers, vendor, product):
        draft = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()
        other = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()
        client.put(f"/orders/purchase/{other['id']}/status", json={"status": "CONFIRMED"}, headers=admin_headers)

        assert client.delete(f"/purchase-orders/{draft['id']}", headers=admin_headers).status_code == 204
        assert client.get(f"/purchase-orders/{draft['id']}", headers=admin_headers).status_code == 404

        response = client.delete(f"/purchase-orders/{other['id']}", headers=admin_headers)
        assert response.status_code == 400
        assert "Only DRAFT orders can be deleted" in response.json()["detail"]

    def test_accountant_cannot_delete(self, client, admin_headers, accountant_headers, vendor, product):
        draft = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()
        assert client.delete(f"/purchase-orders/{draft['id']}", headers=accountant_headers).status_code == 403

    def test_update_replaces_items_and_confirms(self, client, admin_headers, vendor, product):
        draft = client.post("/purchase-orders/", json=_po_body(vendor, product, items=[]), headers=admin_headers).json()
        response = client.put(
            f"/purchase-orders/{draft['id']}",
            json={
                "status": "CONFIRMED",
                "items": [{"product_id": product.id, "quantity": "3", "unit_price": "10"}],
            },
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "CONFIRMED"
        assert Decimal(data["total_amount"]) == Decimal("30.00")

    def test_cancelling_a_confirmed_order_ignores_items(self, client, admin_headers, vendor, product):
        order = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()
        client.put(f"/orders/purchase/{order['id']}/status", json={"status": "CONFIRMED"}, headers=admin_headers)

        response = client.put(
            f"/purchase-orders/{order['id']}",
            json={
                "status": "CANCELLED",
                "items": [{"product_id": product.id, "quantity": "9", "unit_price": "10"}],
            },
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "CANCELLED"
        assert Decimal(data["total_amount"]) == Decimal("220.00")
        assert len(data["items"]) == 1
        assert Decimal(data["items"][0]["quantity"]) == Decimal("2")

    def test_items_without_confirmation_leave_draft_unchanged(self, client, admin_headers, vendor, product):
        draft = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()

        response = client.put(
            f"/purchase-orders/{draft['id']}",
            json={"notes": "x", "items": [{"product_id": product.id, "quantity": "5", "unit_price": "100"}]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "DRAFT"
        assert data["notes"] == "x"
        assert Decimal(data["total_amount"]) == Decimal("220.00")
        assert len(data["items"]) == 1

    def test_other_tenant_sees_nothing(self, client, admin_headers, headers_for, vendor, product):
        created = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()
        other = headers_for("ADMIN", tenant_id="tenant-b")
        assert client.get(f"/purchase-orders/{created['id']}", headers=other).status_code == 404
        assert client.get("/purchase-orders/", headers=other).json() == []


@pytest.mark.integration
class TestOrderStatusEndpoint:

    def test_confirm_then_reject_backwards_move(self, client, admin_headers, vendor, product):
        order = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()

        response = client.put(f"/orders/purchase/{order['id']}/status", json={"status": "CONFIRMED"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Order status updated to CONFIRMED"
        assert response.json()["order"]["status"] == "CONFIRMED"

        response = client.put(f"/orders/purchase/{order['id']}/status", json={"status": "DRAFT"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot transition from CONFIRMED to DRAFT"

        info = client.get(f"/orders/purchase/{order['id']}/status", headers=admin_headers).json()
        assert info["current_status"] == "CONFIRMED"

    def test_empty_order_cannot_be_confirmed(self, client, admin_headers, vendor, product):
        order = client.post("/purchase-orders/", json=_po_body(vendor, product, items=[]), headers=admin_headers).json()
        response = client.put(f"/orders/purchase/{order['id']}/status", json={"status": "CONFIRMED"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot confirm order without items"

    def test_sales_orders_share_the_machine(self, client, admin_headers, customer, product):
        body = {
            "customer_id": customer.id,
            "order_date": "2026-03-15",
            "items": [{"product_id": product.id, "quantity": "1", "unit_price": "150"}],
        }
        order = client.post("/sales-orders/", json=body, headers=admin_headers).json()
        assert order["so_number"] == "SO-202603-0001"
        for target in ("CONFIRMED", "IN_PROGRESS", "COMPLETED"):
            response = client.put(f"/orders/sales/{order['id']}/status", json={"status": target}, headers=admin_headers)
            assert response.status_code == 200
        response = client.put(f"/orders/sales/{order['id']}/status", json={"status": "CANCELLED"}, headers=admin_headers)
        assert response.status_code == 400

    def test_bad_order_type(self, client, admin_headers):
        response = client.put("/orders/rental/1/status", json={"status": "CONFIRMED"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid order type. Must be 'purchase' or 'sales'"

    def test_unknown_order(self, client, admin_headers):
        response = client.put("/orders/purchase/999/status", json={"status": "CONFIRMED"}, headers=admin_headers)
        assert response.status_code == 404

    def test_unknown_status_value(self, client, admin_headers, vendor, product):
        order = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()
        response = client.put(f"/orders/purchase/{order['id']}/status", json={"status": "SHIPPED"}, headers=admin_headers)
        assert response.status_code == 400

    def test_missing_token(self, client, tenant_id):
        response = client.put("/orders/purchase/1/status", json={"status": "CONFIRMED"}, headers={"X-Tenant-ID": tenant_id})
        assert response.status_code == 401

    def test_contact_role_forbidden(self, client, headers_for, vendor, product, admin_headers):
        order = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()
        response = client.put(
            f"/orders/purchase/{order['id']}/status",
            json={"status": "CONFIRMED"},
            headers=headers_for("CONTACT", contact_id=vendor.id),
        )
        assert response.status_code == 403

    def test_missing_tenant_header(self, client, admin_headers):
        headers = {"Authorization": admin_headers["Authorization"]}
        response = client.put("/orders/purchase/1/status", json={"status": "CONFIRMED"}, headers=headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "X-Tenant-ID header is missing"

    def test_unexpected_error_becomes_generic_500(self, admin_headers):
        def broken_matrix():
            raise RuntimeError("permission store unavailable")

        app.dependency_overrides[get_permission_matrix] = broken_matrix
        client = TestClient(app, raise_server_exceptions=False)
        response = client.put("/orders/purchase/1/status", json={"status": "CONFIRMED"}, headers=admin_headers)
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}

    def test_status_change_is_audited(self, client, admin_headers, vendor, product):
        order = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()
        client.put(f"/orders/purchase/{order['id']}/status", json={"status": "CONFIRMED"}, headers=admin_headers)

        logs = client.get(f"/audit-log/purchase_orders/{order['id']}", headers=admin_headers).json()
        assert len(logs) == 1
        assert logs[0]["old_values"]["status"] == "DRAFT"
        assert logs[0]["new_values"]["status"] == "CONFIRMED"
        assert logs[0]["changed_by"] == "admin@example.com"


@pytest.mark.integration
class TestOrderItemEndpoints:

    def test_add_update_delete_keeps_total(self, client, admin_headers, vendor, product):
        order = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()

        response = client.post(
            "/order-items/",
            json={"order_id": order["id"], "order_type": "PURCHASE", "product_id": product.id, "quantity": "1", "unit_price": "50"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        item_id = response.json()["id"]
        assert Decimal(client.get(f"/purchase-orders/{order['id']}", headers=admin_headers).json()["total_amount"]) == Decimal("270.00")

        response = client.put(f"/order-items/{item_id}", json={"quantity": "2"}, headers=admin_headers)
        assert response.status_code == 200
        assert Decimal(response.json()["total_amount"]) == Decimal("100.00")
        assert Decimal(client.get(f"/purchase-orders/{order['id']}", headers=admin_headers).json()["total_amount"]) == Decimal("320.00")

        assert client.delete(f"/order-items/{item_id}", headers=admin_headers).status_code == 204
        assert Decimal(client.get(f"/purchase-orders/{order['id']}", headers=admin_headers).json()["total_amount"]) == Decimal("220.00")

    def test_items_locked_after_confirmation(self, client, admin_headers, vendor, product):
        order = client.post("/purchase-orders/", json=_po_body(vendor, product), headers=admin_headers).json()
        client.put(f"/orders/purchase/{order['id']}/status", json={"status": "CONFIRMED"}, headers=admin_headers)

        response = client.post(
            "/order-items/",
            json={"order_id": order["id"], "order_type": "PURCHASE", "product_id": product.id, "quantity": "1", "unit_price": "50"},
            headers=admin_headers,
        )
        assert response.status_code == 400
