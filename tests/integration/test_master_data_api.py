"""
Integration tests for contacts, products, the chart of accounts, taxes and payment methods.
"""
from decimal import Decimal

import pytest


@pytest.mark.integration
class TestContacts:

    def test_create_filter_and_archive(self, client, admin_headers):
        vendor = client.post("/contacts/", json={"type": "VENDOR", "name": "Acme"}, headers=admin_headers).json()
        both = client.post("/contacts/", json={"type": "BOTH", "name": "Initech"}, headers=admin_headers).json()
        client.post("/contacts/", json={"type": "CUSTOMER", "name": "Globex"}, headers=admin_headers)

        vendors = client.get("/contacts/?type=VENDOR", headers=admin_headers).json()
        assert sorted(c["name"] for c in vendors) == ["Acme", "Initech"]

        response = client.delete(f"/contacts/{vendor['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert [c["id"] for c in client.get("/contacts/?type=VENDOR", headers=admin_headers).json()] == [both["id"]]
        assert len(client.get("/contacts/?include_inactive=true", headers=admin_headers).json()) == 3

    def test_invalid_type_and_email(self, client, admin_headers):
        assert client.post("/contacts/", json={"type": "PARTNER", "name": "X"}, headers=admin_headers).status_code == 400
        response = client.post("/contacts/", json={"type": "VENDOR", "name": "X", "email": "nope"}, headers=admin_headers)
        assert response.status_code == 400

    def test_accountant_cannot_archive(self, client, accountant_headers, vendor):
        assert client.delete(f"/contacts/{vendor.id}", headers=accountant_headers).status_code == 403

    def test_contact_user_sees_only_itself(self, client, headers_for, vendor, customer):
        headers = headers_for("CONTACT", contact_id=customer.id)
        assert [c["id"] for c in client.get("/contacts/", headers=headers).json()] == [customer.id]
        assert client.get(f"/contacts/{vendor.id}", headers=headers).status_code == 404


@pytest.mark.integration
class TestProducts:

    def test_crud(self, client, admin_headers):
        created = client.post(
            "/products/", json={"name": "Consulting", "type": "SERVICE", "sales_price": "1200"}, headers=admin_headers
        )
        assert created.status_code == 201
        product_id = created.json()["id"]

        updated = client.put(f"/products/{product_id}", json={"category": "Services"}, headers=admin_headers)
        assert updated.json()["category"] == "Services"

        assert client.delete(f"/products/{product_id}", headers=admin_headers).status_code == 200
        assert client.get("/products/", headers=admin_headers).json() == []
        assert client.get("/products/999", headers=admin_headers).status_code == 404


@pytest.mark.integration
class TestChartOfAccounts:

    def test_initialize_is_repeatable(self, client, admin_headers):
        first = client.post("/chart-of-accounts/initialize", headers=admin_headers)
        assert first.status_code == 200
        assert len(first.json()) == 10
        assert client.post("/chart-of-accounts/initialize", headers=admin_headers).json() == []

        income = client.get("/chart-of-accounts/?account_type=income", headers=admin_headers).json()
        assert [a["code"] for a in income] == ["4000"]

    def test_duplicate_code_and_self_parent(self, client, admin_headers):
        body = {"code": "1500", "name": "Prepaid Expenses", "type": "asset"}
        created = client.post("/chart-of-accounts/", json=body, headers=admin_headers)
        assert created.status_code == 201
        assert created.json()["type"] == "ASSET"
        account_id = created.json()["id"]

        assert client.post("/chart-of-accounts/", json=body, headers=admin_headers).status_code == 400
        response = client.patch(f"/chart-of-accounts/{account_id}", json={"parent_id": account_id}, headers=admin_headers)
        assert response.status_code == 400

    def test_deactivate(self, client, admin_headers):
        account = client.post(
            "/chart-of-accounts/", json={"code": "7000", "name": "Misc", "type": "EXPENSE"}, headers=admin_headers
        ).json()
        assert client.delete(f"/chart-of-accounts/{account['id']}", headers=admin_headers).status_code == 204
        assert client.get("/chart-of-accounts/", headers=admin_headers).json() == []
        assert client.get("/chart-of-accounts/?include_inactive=true", headers=admin_headers).json()[0]["is_active"] is False

    def test_unknown_parent(self, client, admin_headers):
        body = {"code": "1600", "name": "Deposits", "type": "ASSET", "parent_id": 999}
        assert client.post("/chart-of-accounts/", json=body, headers=admin_headers).status_code == 404


@pytest.mark.integration
class TestTaxRates:

    def test_create_list_update_delete(self, client, admin_headers):
        created = client.post(
            "/taxes/", json={"name": "GST 18%", "rate": "18", "hsn_codes": ["9983"]}, headers=admin_headers
        )
        assert created.status_code == 201
        data = created.json()
        assert data["type"] == "exclusive"
        assert data["category"] == "both"
        assert data["hsn_codes"] == ["9983"]

        updated = client.put(f"/taxes/{data['id']}", json={"rate": "12", "category": "SALES"}, headers=admin_headers)
        assert updated.status_code == 200
        assert Decimal(updated.json()["rate"]) == Decimal("12")
        assert updated.json()["category"] == "sales"

        deleted = client.delete(f"/taxes/{data['id']}", headers=admin_headers)
        assert deleted.json() == {"message": "Tax rate deleted successfully"}
        assert client.get("/taxes/", headers=admin_headers).json() == []
        assert client.put(f"/taxes/{data['id']}", json={"rate": "5"}, headers=admin_headers).status_code == 404

    def test_only_one_default_per_tenant(self, client, admin_headers, headers_for):
        other_tenant = headers_for("ADMIN", tenant_id="tenant-b")
        foreign = client.post("/taxes/", json={"name": "VAT", "rate": "20", "is_default": True}, headers=other_tenant).json()
        first = client.post("/taxes/", json={"name": "GST 5%", "rate": "5", "is_default": True}, headers=admin_headers).json()
        second = client.post("/taxes/", json={"name": "GST 18%", "rate": "18", "is_default": True}, headers=admin_headers).json()

        rates = {r["id"]: r["is_default"] for r in client.get("/taxes/", headers=admin_headers).json()}
        assert rates == {first["id"]: False, second["id"]: True}

        client.put(f"/taxes/{first['id']}", json={"is_default": True}, headers=admin_headers)
        rates = {r["id"]: r["is_default"] for r in client.get("/taxes/", headers=admin_headers).json()}
        assert rates == {first["id"]: True, second["id"]: False}
        assert client.get("/taxes/", headers=other_tenant).json()[0]["id"] == foreign["id"]
        assert client.get("/taxes/", headers=other_tenant).json()[0]["is_default"] is True

    def test_invalid_rate_and_type(self, client, admin_headers):
        assert client.post("/taxes/", json={"name": "Bad", "rate": "-1"}, headers=admin_headers).status_code == 400
        assert client.post("/taxes/", json={"name": "Bad", "rate": "5", "type": "compound"}, headers=admin_headers).status_code == 400
        assert client.post("/taxes/", json={"rate": "5"}, headers=admin_headers).status_code == 400

    def test_accountant_cannot_delete(self, client, admin_headers, accountant_headers):
        created = client.post("/taxes/", json={"name": "GST", "rate": "18"}, headers=admin_headers).json()
        assert client.delete(f"/taxes/{created['id']}", headers=accountant_headers).status_code == 403
        assert client.put(f"/taxes/{created['id']}", json={"rate": "12"}, headers=accountant_headers).status_code == 200

    def test_contact_cannot_view(self, client, headers_for, customer):
        assert client.get("/taxes/", headers=headers_for("CONTACT", contact_id=customer.id)).status_code == 403

    def test_configuration_defaults_then_saved(self, client, admin_headers, headers_for):
        defaults = client.get("/taxes/config", headers=admin_headers)
        assert defaults.status_code == 200
        assert defaults.json()["enable_tax"] is True
        assert Decimal(defaults.json()["default_tax_rate"]) == Decimal("18")
        assert defaults.json()["rounding_method"] == "round"
        assert defaults.json()["id"] is None

        body = {"enable_tax": False, "default_tax_rate": "12", "prices_include_tax": True}
        saved = client.put("/taxes/config", json=body, headers=admin_headers)
        assert saved.status_code == 200
        assert saved.json()["id"] is not None

        again = client.put("/taxes/config", json={**body, "rounding_method": "floor"}, headers=admin_headers).json()
        assert again["id"] == saved.json()["id"]
        current = client.get("/taxes/config", headers=admin_headers).json()
        assert current["enable_tax"] is False
        assert current["prices_include_tax"] is True
        assert current["rounding_method"] == "floor"

        assert client.get("/taxes/config", headers=headers_for("ADMIN", tenant_id="tenant-b")).json()["enable_tax"] is True
        assert client.put("/taxes/config", json={"default_tax_rate": "-5"}, headers=admin_headers).status_code == 400


@pytest.mark.integration
class TestPaymentMethods:

    def test_linked_to_chart_of_accounts(self, client, admin_headers):
        client.post("/chart-of-accounts/initialize", headers=admin_headers)
        bank = next(a for a in client.get("/chart-of-accounts/", headers=admin_headers).json() if a["code"] == "1010")

        created = client.post(
            "/payment-methods/", json={"name": "HDFC Current", "type": "bank", "account_id": bank["id"]}, headers=admin_headers
        )
        assert created.status_code == 201
        assert created.json()["type"] == "BANK"
        assert created.json()["account_name"] == "Bank"

        listed = client.get("/payment-methods/", headers=admin_headers).json()
        assert [(m["name"], m["account_name"]) for m in listed] == [("HDFC Current", "Bank")]

    def test_unknown_or_foreign_account(self, client, admin_headers, headers_for):
        response = client.post("/payment-methods/", json={"name": "X", "type": "CASH", "account_id": 999}, headers=admin_headers)
        assert response.status_code == 404

        other = headers_for("ADMIN", tenant_id="tenant-b")
        foreign = client.post("/chart-of-accounts/", json={"code": "1000", "name": "Cash", "type": "ASSET"}, headers=other).json()
        response = client.post(
            "/payment-methods/", json={"name": "X", "type": "CASH", "account_id": foreign["id"]}, headers=admin_headers
        )
        assert response.status_code == 404

    def test_invalid_type(self, client, admin_headers):
        response = client.post("/payment-methods/", json={"name": "Cheque", "type": "CHEQUE"}, headers=admin_headers)
        assert response.status_code == 400

    def test_update_and_deactivate(self, client, admin_headers, accountant_headers):
        method = client.post("/payment-methods/", json={"name": "Till", "type": "CASH"}, headers=admin_headers).json()
        assert method["account_name"] is None

        updated = client.put(f"/payment-methods/{method['id']}", json={"description": "Front desk"}, headers=accountant_headers)
        assert updated.json()["description"] == "Front desk"

        assert client.delete(f"/payment-methods/{method['id']}", headers=accountant_headers).status_code == 403
        assert client.delete(f"/payment-methods/{method['id']}", headers=admin_headers).status_code == 200
        assert client.get("/payment-methods/", headers=admin_headers).json() == []
        inactive = client.get("/payment-methods/?include_inactive=true", headers=admin_headers).json()
        assert inactive[0]["is_active"] is False

    def test_contact_cannot_manage(self, client, headers_for, customer):
        headers = headers_for("CONTACT", contact_id=customer.id)
        assert client.post("/payment-methods/", json={"name": "X", "type": "CASH"}, headers=headers).status_code == 403
