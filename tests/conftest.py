import pytest
from fastapi.testclient import TestClient

from sales_app import config
from sales_app.fonts import initialize_fonts


COMPANY_INFO = {
    "company_name": "株式会社サンプル商事",
    "company_postalCode": "100-0001",
    "company_address": "東京都千代田区千代田1-1",
    "company_phone": "03-1234-5678",
    "company_fax": "03-8765-4321",
    "company_mail": "info@example.co.jp",
    "company_contactPerson": "山田",
    "company_bankName": "〇〇銀行",
    "company_bankBranch": "△△支店",
    "company_bankType": "普通",
    "company_bankNumber": "1234567",
    "company_bankHolder": "カ）サンプルショウジ",
    "company_invoiveNumber": "T1234567890123",
}

CUSTOMER = {
    "customer_id": "C000001",
    "customer_name": "取引先A",
    "customer_formalName": "株式会社取引先A",
    "customer_postalCode": "111-2222",
    "customer_address": "神奈川県横浜市中区1-2-3",
}


def make_items(count, unit_price=100, quantity=1):
    return [
        {
            "productCode": f"ITEM-{i:03d}",
            "quantity": quantity,
            "unit": "個",
            "unitPrice": unit_price,
            "remarks": "",
        }
        for i in range(1, count + 1)
    ]


def bulk_payload(count=1, **overrides):
    payload = {
        "deliveries": make_items(count),
        "companyInfo": dict(COMPANY_INFO),
        "customers": [dict(CUSTOMER)],
        "delivery_number": "N001",
        "delivery_date": "2025/07/30",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DATA_DIR", tmp_path / "data")
    return tmp_path / "data"


@pytest.fixture
def font_name(monkeypatch):
    monkeypatch.setattr(config, "PDF_FONT_PATH", "")
    return initialize_fonts()


@pytest.fixture
def client(data_dir, monkeypatch):
    monkeypatch.setattr(config, "PDF_FONT_PATH", "")
    monkeypatch.setattr(config, "PDF_ASSEMBLY_STRATEGY", "compose")

    from backend_api.main import app

    with TestClient(app) as test_client:
        yield test_client
