from io import BytesIO
from urllib.parse import unquote

import pytest
from fastapi.testclient import TestClient
from pypdf import PdfReader

from conftest import COMPANY_INFO, CUSTOMER, bulk_payload
from sales_app import config, fonts


BULK_URL = "/api/delivery/generate-bulk-pdf"
INDIVIDUAL_URL = "/api/delivery/generate-individual-pdf"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/api").json()["version"] == "1.0.0"


def test_bulk_pdf_returns_attachment(client):
    response = client.post(BULK_URL, json=bulk_payload(25))

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    disposition = response.headers["content-disposition"]
    assert disposition.startswith("attachment; filename*=UTF-8''")
    assert unquote(disposition.split("''", 1)[1]) == "納品書_N001.pdf"
    assert len(PdfReader(BytesIO(response.content)).pages) == 3


def test_bulk_pdf_without_note_number(client):
    response = client.post(BULK_URL, json=bulk_payload(1, delivery_number=None))

    assert response.status_code == 200
    assert unquote(response.headers["content-disposition"].split("''", 1)[1]) == "納品書_未設定.pdf"


def test_bulk_pdf_missing_company(client):
    response = client.post(BULK_URL, json=bulk_payload(companyInfo=None))

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "MissingCompanyInfo"


def test_bulk_pdf_missing_items(client):
    response = client.post(BULK_URL, json=bulk_payload(deliveries=[]))

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "MissingItems"


def test_bulk_pdf_missing_customers(client):
    response = client.post(BULK_URL, json=bulk_payload(customers=[]))

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "MissingCustomerInfo"


def test_bulk_pdf_bad_number_is_render_error(client):
    payload = bulk_payload()
    payload["deliveries"][0]["unitPrice"] = "abc"

    response = client.post(BULK_URL, json=payload)

    assert response.status_code == 500
    assert response.json()["detail"]["error"] == "RenderError"


def test_bulk_pdf_without_fonts_is_unavailable(client):
    fonts.reset_fonts()
    try:
        response = client.post(BULK_URL, json=bulk_payload())
    finally:
        fonts.initialize_fonts("")

    assert response.status_code == 503
    assert response.json()["detail"]["error"] == "FontInitError"


def test_individual_pdf(client):
    payload = {
        "delivery": {
            "product_name": "商品A",
            "quantity": 2,
            "delivery_unit": "箱",
            "unit_price": 1500,
            "delivery_number": "D-10",
        },
        "companyInfo": COMPANY_INFO,
        "customer": CUSTOMER,
    }

    response = client.post(INDIVIDUAL_URL, json=payload)

    assert response.status_code == 200
    assert unquote(response.headers["content-disposition"].split("''", 1)[1]) == "納品書_D-10.pdf"
    assert len(PdfReader(BytesIO(response.content)).pages) == 1


def test_individual_pdf_missing_customer(client):
    payload = {"delivery": {"product_name": "商品A"}, "companyInfo": COMPANY_INFO}

    response = client.post(INDIVIDUAL_URL, json=payload)

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "MissingCustomerInfo"


def test_company_round_trip(client):
    assert client.get("/api/company").status_code == 404

    saved = client.post("/api/company", json=COMPANY_INFO)
    assert saved.status_code == 200
    assert saved.json()["success"] is True

    loaded = client.get("/api/company").json()
    assert loaded["company_name"] == "株式会社サンプル商事"
    assert loaded["company_invoiveNumber"] == "T1234567890123"


def test_customer_crud(client):
    assert client.get("/api/customers").json() == []

    first = client.post(
        "/api/customers",
        json={"customer_name": "取引先A", "customer_postalCode": "１００ー０００１", "customer_phone": "０３-１２３４-５６７８"},
    )
    second = client.post("/api/customers", json={"customer_name": "取引先B"})

    assert first.status_code == 201
    assert first.json()["customer_id"] == "C000001"
    assert first.json()["customer_phone"] == "03-1234-5678"
    assert second.json()["customer_id"] == "C000002"

    updated = client.put("/api/customers/C000002", json={"customer_address": "大阪府"})
    assert updated.status_code == 200
    assert updated.json()["customer"]["customer_address"] == "大阪府"
    assert updated.json()["customer"]["customer_name"] == "取引先B"

    assert client.put("/api/customers/C999999", json={"customer_address": "x"}).status_code == 404
    assert client.delete("/api/customers/C000001").status_code == 200
    assert client.delete("/api/customers/C000001").status_code == 404
    assert [c["customer_id"] for c in client.get("/api/customers").json()] == ["C000002"]


def test_product_crud(client):
    created = client.post("/api/products", json={"product_name": "商品A", "product_unitPrice": 1200})

    assert created.status_code == 201
    assert created.json()["product_id"] == "P00000001"

    updated = client.put("/api/products/P00000001", json={"product_unitPrice": 1500})
    assert updated.json()["product"]["product_unitPrice"] == 1500

    assert client.delete("/api/products/P00000001").status_code == 200
    assert client.get("/api/products").json() == []


def test_delivery_crud(client):
    created = client.post(
        "/api/delivery",
        json={"product_name": "商品A", "quantity": 2, "unit_price": 500, "custom_field": "x"},
    )

    assert created.status_code == 201
    delivery = created.json()
    assert delivery["delivery_id"].startswith("del-")
    assert delivery["custom_field"] == "x"

    assert client.get(f"/api/delivery/{delivery['delivery_id']}").json()["product_name"] == "商品A"
    assert len(client.get("/api/delivery").json()) == 1
    assert client.delete(f"/api/delivery/{delivery['delivery_id']}").status_code == 200
    assert client.get(f"/api/delivery/{delivery['delivery_id']}").status_code == 404


def test_users(client):
    user = {"user_id": "u1", "user_name": "山田", "user_authority": "admin"}

    assert client.post("/api/users", json=user).status_code == 201
    assert client.post("/api/users", json=user).status_code == 409
    assert client.get("/api/users").json() == [user]
    assert client.delete("/api/users/u1").status_code == 200
    assert client.delete("/api/users/u1").status_code == 404


def test_export_customers_csv_has_bom(client):
    client.post("/api/customers", json={"customer_name": "取引先A"})

    response = client.get("/api/export", params={"type": "customer_list"})

    assert response.status_code == 200
    assert response.content.startswith("\ufeff".encode("utf-8"))
    assert "customer_list.csv" in response.headers["content-disposition"]
    text = response.content.decode("utf-8-sig")
    assert text.splitlines()[0].startswith("customer_id,")
    assert "C000001" in text


def test_export_unknown_type(client):
    assert client.get("/api/export", params={"type": "invoices"}).status_code == 400


def test_import_upserts_by_id(client):
    client.post("/api/customers", json={"customer_name": "旧名称"})
    csv_bytes = (
        "\ufeffcustomer_id,customer_name\r\n"
        "C000001,新名称\r\n"
        "C000005,追加取引先\r\n"
        ",IDなし\r\n"
    ).encode("utf-8")

    response = client.post(
        "/api/import",
        files={"file": ("customers.csv", csv_bytes, "text/csv")},
        data={"dataType": "customer_list"},
    )

    assert response.status_code == 200
    assert response.json()["imported"] == 2
    assert response.json()["skipped"] == 1
    customers = {c["customer_id"]: c for c in client.get("/api/customers").json()}
    assert customers["C000001"]["customer_name"] == "新名称"
    assert customers["C000005"]["customer_name"] == "追加取引先"


def test_import_company_rejects_multiple_rows(client):
    csv_bytes = "company_name\r\nA社\r\nB社\r\n".encode("utf-8")

    response = client.post(
        "/api/import",
        files={"file": ("company.csv", csv_bytes, "text/csv")},
        data={"dataType": "company_info"},
    )

    assert response.status_code == 400
    assert client.get("/api/company").status_code == 404


def test_import_requires_file_and_type(client):
    response = client.post("/api/import", data={"dataType": "customer_list"})
    assert response.status_code == 400
    assert "error" in response.json()["detail"]


def test_assembly_strategy_is_resolved_at_startup(data_dir, monkeypatch):
    from backend_api.main import app

    monkeypatch.setattr(config, "PDF_FONT_PATH", "")
    monkeypatch.setattr(config, "PDF_ASSEMBLY_STRATEGY", "merge")

    with TestClient(app) as test_client:
        assert app.state.assembler.name == "merge"
        response = test_client.post(BULK_URL, json=bulk_payload(11))

    assert response.status_code == 200
    assert len(PdfReader(BytesIO(response.content)).pages) == 2


def test_unknown_assembly_strategy_fails_startup(data_dir, monkeypatch):
    from backend_api.main import app

    monkeypatch.setattr(config, "PDF_FONT_PATH", "")
    monkeypatch.setattr(config, "PDF_ASSEMBLY_STRATEGY", "zip")

    with pytest.raises(ValueError, match="zip"):
        with TestClient(app):
            pass
