"""
API tests with FastAPI's TestClient. Services use fresh in-memory state.
"""

import json

import pytest
from fastapi.testclient import TestClient

from bento.config import settings
from bento.dependencies import get_chat_parser, get_learner, get_ocr_service, get_pipeline
from bento.main import app
from bento.services.chat_parser import ChatParser
from bento.services.classifier import CategoryClassifier
from bento.services.ocr import OCRError
from bento.services.slip_pipeline import SlipExtractionPipeline

from conftest import KBANK_TRANSFER_SLIP


class FakeOCR:

    async def recognize(self, image_data: bytes) -> str:
        if image_data == b"broken":
            raise OCRError("Text recognition failed")
        return KBANK_TRANSFER_SLIP


@pytest.fixture
def client(learner):
    classifier = CategoryClassifier(preferences=learner)
    app.dependency_overrides[get_learner] = lambda: learner
    app.dependency_overrides[get_chat_parser] = lambda: ChatParser(classifier)
    app.dependency_overrides[get_pipeline] = lambda: SlipExtractionPipeline(classifier)
    app.dependency_overrides[get_ocr_service] = lambda: FakeOCR()
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root_lists_endpoints(self, client):
        body = client.get("/").json()

        assert body["message"] == f"{settings.APP_NAME} API"
        assert "/chat" in body["endpoints"]
        assert "/scan" in body["endpoints"]


class TestChat:

    def test_expense(self, client):
        response = client.post("/chat", json={"text": "กินข้าว 60 บาท"})

        assert response.status_code == 200
        data = response.json()
        assert data["understood"] is True
        assert data["reply"] == "บันทึกรายจ่าย 60 บาท เรียบร้อยแล้วครับ! ✅"
        assert data["draft"]["category"] == "อาหาร"
        assert data["draft"]["note"] == "กินข้าว"

    def test_income(self, client):
        data = client.post("/chat", json={"text": "เงินเดือนเข้า 20000"}).json()

        assert data["reply"] == "บันทึกรายรับ 20,000 บาท เรียบร้อยแล้วครับ! ✅"
        assert data["draft"]["kind"] == "income"
        assert data["draft"]["category"] == "income"

    def test_not_understood_is_not_an_error(self, client):
        response = client.post("/chat", json={"text": "สวัสดีครับ"})

        assert response.status_code == 200
        data = response.json()
        assert data["understood"] is False
        assert data["draft"] is None
        assert "ลองพิมพ์ใหม่" in data["reply"]


class TestScan:

    def test_scan_batch(self, client):
        files = [
            ("files", ("a.png", b"slip", "image/png")),
            ("files", ("b.jpg", b"broken", "image/jpeg")),
        ]

        response = client.post("/scan", files=files)

        assert response.status_code == 200
        data = response.json()
        assert data["errors"] == 1
        assert len(data["drafts"]) == 2
        assert data["drafts"][0]["note"] == "ร้านกาแฟ ดอยช้าง"
        assert data["drafts"][0]["source_index"] == 1
        assert data["drafts"][1]["error"]

    def test_ledger_duplicates(self, client):
        ledger = [{"amount": "85.00", "date": "18/10/2569", "category": "อาหาร"}]

        response = client.post(
            "/scan",
            files=[("files", ("a.png", b"slip", "image/png"))],
            data={"ledger": json.dumps(ledger)}
        )

        assert response.status_code == 200
        assert response.json()["drafts"][0]["is_duplicate"] is True

    def test_invalid_ledger(self, client):
        response = client.post(
            "/scan",
            files=[("files", ("a.png", b"slip", "image/png"))],
            data={"ledger": "[{\"amount\": \"x\"}]"}
        )
        assert response.status_code == 400

    def test_invalid_type(self, client):
        response = client.post("/scan", files=[("files", ("a.pdf", b"%PDF", "application/pdf"))])
        assert response.status_code == 400


class TestPreferences:

    def test_edit_then_lookup(self, client):
        transaction = {
            "amount": "85.00",
            "kind": "expense",
            "category": "อาหาร",
            "date": "18/10/2569",
            "note": "ร้านกาแฟดอยช้าง",
            "counterparty_name": "ร้านกาแฟดอยช้าง",
        }

        response = client.post("/preferences/edits", json={
            "transaction": transaction,
            "original_category": "อาหาร",
            "new_category": "บันเทิง",
        })

        assert response.status_code == 200
        assert response.json() == {"learned": True, "counterparty": "ร้านกาแฟดอยช้าง"}

        lookup = client.get("/preferences/ร้านกาแฟดอยช้าง")
        assert lookup.status_code == 200
        assert lookup.json()["category"] == "บันเทิง"

    def test_learned_preference_used_by_scan(self, client, learner):
        learner.record("ร้านกาแฟ ดอยช้าง", "บันเทิง")

        response = client.post("/scan", files=[("files", ("a.png", b"slip", "image/png"))])

        assert response.json()["drafts"][0]["category"] == "บันเทิง"

    def test_unknown_counterparty(self, client):
        assert client.get("/preferences/ร้านที่ไม่รู้จัก").status_code == 404
