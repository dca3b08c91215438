"""Router tests for the RFQ, vendor reply and award endpoints.

These tests mock the service layer and verify request parsing, status codes,
camelCase response bodies and the error envelope.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from buildquote.app import create_app
from buildquote.config import settings
from buildquote.database.session import get_db
from buildquote.dependencies import get_notifier, get_sheets, get_storage, get_tokens
from buildquote.exceptions import ForbiddenException, NotFoundException, ValidationException
from buildquote.models.rfq import Rfq
from buildquote.models.vendor import Vendor
from buildquote.modules.award.reconciliation_service import AwardResult
from buildquote.modules.award.schemas import AwardItemGroup, VendorQuote
from buildquote.modules.rfq.distribution_service import DistributionResult, VendorItems
from buildquote.modules.rfq.line_items import parse_line_items
from buildquote.modules.vendor_reply.intake_service import ReplyResult

RFQ_ID = "RFQ-20260309-ABCDEF0123"

PROJECT_INFO = {
    "requesterName": "Pat Rivera",
    "requesterEmail": "pat@example.com",
    "requesterPhone": "555-0199",
    "projectName": "Maple St Duplex",
    "projectAddress": "12 Maple St",
}
ITEMS = [{"Item Name": "2x4 Stud", "Quantity": 100, "Vendors": "Acme,BuildCo"}]

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def app(mock_db, tokens, notifier, storage, sheets):
    app = create_app()

    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_tokens] = lambda: tokens
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_sheets] = lambda: sheets
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def _rfq() -> Rfq:
    return Rfq(
        rfq_id=RFQ_ID,
        requester_name="Pat Rivera",
        requester_email="pat@example.com",
        requester_phone="555-0199",
        project_name="Maple St Duplex",
        project_address="12 Maple St",
        needed_by="2026-11-15",
        items=[{"line_number": 1, "name": "2x4 Stud", "quantity": "100", "vendors": "Acme,BuildCo"}],
        vendors=["Acme", "BuildCo"],
        created_at=datetime(2026, 3, 9, tzinfo=UTC),
    )


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------


class TestApp:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_expected_routes(self, app):
        paths = set(app.openapi()["paths"])
        assert {
            "/api/v1/rfqs/",
            "/api/v1/rfqs/{rfq_id}/vendor-items/{token}",
            "/api/v1/rfqs/{rfq_id}/vendor-reply/{token}",
            "/api/v1/rfqs/{rfq_id}/award-items/{token}",
            "/api/v1/rfqs/{rfq_id}/award/{token}",
            "/api/v1/vendors/",
            "/api/v1/materials/",
            "/api/v1/sync/rfqs",
            "/api/v1/sync/vendors",
            "/api/v1/sync/materials",
        }.issubset(paths)


# ---------------------------------------------------------------------------
# RFQ distribution
# ---------------------------------------------------------------------------


class TestCreateRfqEndpoint:
    def test_json_body(self, client):
        with patch("buildquote.modules.rfq.router.RfqDistributionService") as mock_svc_cls:
            mock_svc = AsyncMock()
            mock_svc.create_rfq.return_value = DistributionResult(
                rfq_id=RFQ_ID, emails_sent=2, sheet_updated=True, award_email_sent=True
            )
            mock_svc_cls.return_value = mock_svc

            response = client.post("/api/v1/rfqs/", json={"projectInfo": PROJECT_INFO, "items": ITEMS})

        assert response.status_code == 201
        body = response.json()
        assert body["rfqId"] == RFQ_ID
        assert body["emailsSent"] == 2
        assert body["emailsSkipped"] == 0
        assert body["awardEmailSent"] is True
        project, items, files = mock_svc.create_rfq.await_args.args
        assert project.project_address == "12 Maple St"
        assert items == ITEMS
        assert files == []

    def test_multipart_with_attachments(self, client):
        with patch("buildquote.modules.rfq.router.RfqDistributionService") as mock_svc_cls:
            mock_svc = AsyncMock()
            mock_svc.create_rfq.return_value = DistributionResult(
                rfq_id=RFQ_ID, folder_link="https://files.example.com/f", file_links=["https://files.example.com/1"]
            )
            mock_svc_cls.return_value = mock_svc

            response = client.post(
                "/api/v1/rfqs/",
                data={"projectInfo": json.dumps(PROJECT_INFO), "items": json.dumps(ITEMS)},
                files=[
                    ("files", ("plan.pdf", b"%PDF", "application/pdf")),
                    ("files", ("photo.jpg", b"\xff\xd8", "image/jpeg")),
                ],
            )

        assert response.status_code == 201
        assert response.json()["fileLinks"] == ["https://files.example.com/1"]
        project, items, files = mock_svc.create_rfq.await_args.args
        assert project.requester_email == "pat@example.com"
        assert items == json.dumps(ITEMS)
        assert [f.filename for f in files] == ["plan.pdf", "photo.jpg"]
        assert files[0].content == b"%PDF"

    def test_malformed_project_info(self, client):
        with patch("buildquote.modules.rfq.router.RfqDistributionService") as mock_svc_cls:
            response = client.post("/api/v1/rfqs/", data={"projectInfo": "{oops", "items": "[]"})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Invalid projectInfo JSON"
        assert error["requestId"]
        mock_svc_cls.assert_not_called()

    def test_non_json_body(self, client):
        response = client.post("/api/v1/rfqs/", content=b"hello", headers={"content-type": "text/plain"})
        assert response.status_code == 400

    def test_service_validation_error_envelope(self, client):
        with patch("buildquote.modules.rfq.router.RfqDistributionService") as mock_svc_cls:
            mock_svc = AsyncMock()
            mock_svc.create_rfq.side_effect = ValidationException(
                "Contact information (name, email, phone) is required",
                details=[{"field": "requesterPhone", "message": "Field required"}],
            )
            mock_svc_cls.return_value = mock_svc

            response = client.post("/api/v1/rfqs/", json={"projectInfo": {}, "items": ITEMS})

        assert response.status_code == 400
        assert response.json()["error"]["details"] == [
            {"field": "requesterPhone", "message": "Field required"}
        ]

    def test_scalar_vendor_selection_is_bad_request(self, client, mock_db):
        items = [{"name": "2x4 Stud", "quantity": 10, "selectedVendors": 5}]
        response = client.post("/api/v1/rfqs/", json={"projectInfo": PROJECT_INFO, "items": items})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Invalid item at position 1"
        mock_db.add.assert_not_called()


class TestVendorItemsEndpoint:
    def test_vendor_items(self, client):
        with patch("buildquote.modules.rfq.router.RfqDistributionService") as mock_svc_cls:
            mock_svc = AsyncMock()
            rfq = _rfq()
            mock_svc.get_vendor_items.return_value = VendorItems(
                rfq=rfq, vendor_name="Acme", items=parse_line_items(rfq.items)
            )
            mock_svc_cls.return_value = mock_svc

            response = client.get(f"/api/v1/rfqs/{RFQ_ID}/vendor-items/tok")

        assert response.status_code == 200
        body = response.json()
        assert body["vendorName"] == "Acme"
        assert body["project"]["siteAddress"] == "12 Maple St"
        assert body["project"]["rfqDate"] == "2026-03-09"
        assert body["items"][0]["name"] == "2x4 Stud"
        assert "vendors" not in body["items"][0]
        mock_svc.get_vendor_items.assert_awaited_once_with(RFQ_ID, "tok")

    def test_forbidden(self, client):
        with patch("buildquote.modules.rfq.router.RfqDistributionService") as mock_svc_cls:
            mock_svc = AsyncMock()
            mock_svc.get_vendor_items.side_effect = ForbiddenException("Invalid RFQ link")
            mock_svc_cls.return_value = mock_svc

            response = client.get(f"/api/v1/rfqs/{RFQ_ID}/vendor-items/tok")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"


# ---------------------------------------------------------------------------
# Vendor replies
# ---------------------------------------------------------------------------


class TestVendorReplyEndpoint:
    @pytest.fixture
    def vendor_token(self, tokens):
        return tokens.issue_vendor_token("Acme", "acme@example.com", RFQ_ID)

    def test_multipart_reply(self, client, vendor_token):
        with patch("buildquote.modules.vendor_reply.router.VendorReplyIntakeService") as mock_svc_cls:
            mock_svc = AsyncMock()
            mock_svc.submit_reply.return_value = ReplyResult(
                reply_id=f"{RFQ_ID}-acme@example.com-1",
                vendor=Vendor(name="Acme", email="acme@example.com", phone="555-0100"),
                items_processed=1,
                subtotal=Decimal("300.00"),
                final_total=Decimal("315.00"),
                files_uploaded=1,
                confirmation_email_sent=True,
            )
            mock_svc_cls.return_value = mock_svc

            replies = json.dumps([{"itemName": "2x4 Stud", "pricing": "3.00"}])
            response = client.post(
                f"/api/v1/rfqs/{RFQ_ID}/vendor-reply/{vendor_token}",
                data={"itemReplies": replies, "deliveryCharges": "25", "discount": "10", "summaryNotes": "Tue"},
                files=[("files_0", ("quote.pdf", b"%PDF", "application/pdf"))],
            )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Reply submitted successfully"
        assert body["itemsProcessed"] == 1
        assert Decimal(body["finalTotal"]) == Decimal("315.00")
        assert body["vendor"] == {"name": "Acme", "email": "acme@example.com", "phone": "555-0100"}

        kwargs = mock_svc.submit_reply.await_args.kwargs
        assert kwargs["rfq_id"] == RFQ_ID
        assert kwargs["token"] == vendor_token
        assert kwargs["item_replies"] == replies
        assert kwargs["delivery_charge"] == "25"
        assert kwargs["summary_notes"] == "Tue"
        assert list(kwargs["files_by_index"]) == [0]
        assert kwargs["files_by_index"][0][0].filename == "quote.pdf"

    def test_vendor_not_found(self, client, vendor_token):
        with patch("buildquote.modules.vendor_reply.router.VendorReplyIntakeService") as mock_svc_cls:
            mock_svc = AsyncMock()
            mock_svc.submit_reply.side_effect = NotFoundException("Vendor not found")
            mock_svc_cls.return_value = mock_svc

            response = client.post(
                f"/api/v1/rfqs/{RFQ_ID}/vendor-reply/{vendor_token}", data={"itemReplies": "[]"}
            )

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Vendor not found"

    def test_invalid_link_rejected_before_reading_uploads(self, client):
        with (
            patch("buildquote.modules.vendor_reply.router.VendorReplyIntakeService") as mock_svc_cls,
            patch("buildquote.modules.vendor_reply.router.read_form") as mock_read_form,
        ):
            response = client.post(
                f"/api/v1/rfqs/{RFQ_ID}/vendor-reply/not-a-token",
                data={"itemReplies": "[]"},
                files=[("files_0", ("quote.pdf", b"%PDF", "application/pdf"))],
            )

        assert response.status_code == 401
        mock_read_form.assert_not_called()
        mock_svc_cls.assert_not_called()

    def test_link_for_other_rfq_forbidden(self, client, tokens):
        other = tokens.issue_vendor_token("Acme", "acme@example.com", "RFQ-20260101-0000000000")
        with patch("buildquote.modules.vendor_reply.router.VendorReplyIntakeService") as mock_svc_cls:
            response = client.post(f"/api/v1/rfqs/{RFQ_ID}/vendor-reply/{other}", data={"itemReplies": "[]"})

        assert response.status_code == 403
        mock_svc_cls.assert_not_called()

    def test_too_many_attachments_is_bad_request(self, client, vendor_token):
        with (
            patch.object(settings, "max_upload_files", 1),
            patch("buildquote.modules.vendor_reply.router.VendorReplyIntakeService") as mock_svc_cls,
        ):
            response = client.post(
                f"/api/v1/rfqs/{RFQ_ID}/vendor-reply/{vendor_token}",
                data={"itemReplies": "[]"},
                files=[
                    ("files_0", ("a.pdf", b"%PDF", "application/pdf")),
                    ("files_1", ("b.pdf", b"%PDF", "application/pdf")),
                ],
            )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        mock_svc_cls.assert_not_called()


# ---------------------------------------------------------------------------
# Awards
# ---------------------------------------------------------------------------


class TestAwardEndpoints:
    def test_award_items(self, client):
        with patch("buildquote.modules.award.router.AwardReconciliationService") as mock_svc_cls:
            mock_svc = AsyncMock()
            mock_svc.get_award_items.return_value = [
                AwardItemGroup(
                    item_name="2x4 Stud",
                    line_number=1,
                    requested_price=Decimal("3.25"),
                    quantity=Decimal("100"),
                    vendors=[
                        VendorQuote(
                            vendor_name="Acme",
                            unit_price=Decimal("3.00"),
                            total_price=Decimal("300.00"),
                            status="pending",
                            reply_id="R1",
                        )
                    ],
                )
            ]
            mock_svc_cls.return_value = mock_svc

            response = client.get(f"/api/v1/rfqs/{RFQ_ID}/award-items/tok")

        assert response.status_code == 200
        body = response.json()
        assert body["rfqId"] == RFQ_ID
        assert body["items"][0]["itemName"] == "2x4 Stud"
        assert body["items"][0]["vendors"][0]["vendorName"] == "Acme"

    def test_award(self, client):
        with patch("buildquote.modules.award.router.AwardReconciliationService") as mock_svc_cls:
            mock_svc = AsyncMock()
            mock_svc.award_item.return_value = AwardResult(
                updated=1, requester_email_sent=True, vendor_email_sent=True
            )
            mock_svc_cls.return_value = mock_svc

            response = client.post(
                f"/api/v1/rfqs/{RFQ_ID}/award/tok",
                json={"item_name": "2x4 Stud", "vendor_name": "Acme"},
            )

        assert response.status_code == 200
        assert response.json() == {"updated": 1, "requesterEmailSent": True, "vendorEmailSent": True}
        mock_svc.award_item.assert_awaited_once_with(RFQ_ID, "tok", "2x4 Stud", "Acme")

    def test_award_accepts_camel_case(self, client):
        with patch("buildquote.modules.award.router.AwardReconciliationService") as mock_svc_cls:
            mock_svc = AsyncMock()
            mock_svc.award_item.return_value = AwardResult(updated=1)
            mock_svc_cls.return_value = mock_svc

            response = client.post(
                f"/api/v1/rfqs/{RFQ_ID}/award/tok", json={"itemName": "2x4 Stud", "vendorName": "Acme"}
            )

        assert response.status_code == 200

    def test_award_requires_vendor(self, client):
        response = client.post(f"/api/v1/rfqs/{RFQ_ID}/award/tok", json={"item_name": "2x4 Stud"})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"]

    def test_award_malformed_json_is_bad_request(self, client):
        with patch("buildquote.modules.award.router.AwardReconciliationService") as mock_svc_cls:
            response = client.post(
                f"/api/v1/rfqs/{RFQ_ID}/award/tok",
                content=b"{bad json",
                headers={"content-type": "application/json"},
            )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        mock_svc_cls.assert_not_called()

    def test_award_no_match(self, client):
        with patch("buildquote.modules.award.router.AwardReconciliationService") as mock_svc_cls:
            mock_svc = AsyncMock()
            mock_svc.award_item.side_effect = NotFoundException("No items updated")
            mock_svc_cls.return_value = mock_svc

            response = client.post(
                f"/api/v1/rfqs/{RFQ_ID}/award/tok",
                json={"item_name": "2x4 Stud", "vendor_name": "Nobody"},
            )

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "No items updated"


# ---------------------------------------------------------------------------
# Sync
# ---------------------------------------------------------------------------


class TestSyncEndpoints:
    def test_requires_sync_key(self, client):
        response = client.post("/api/v1/sync/vendors", json={"data": []})
        assert response.status_code == 401

    def test_wrong_sync_key(self, client):
        response = client.post(
            "/api/v1/sync/vendors", json={"data": []}, headers={"X-Sync-Key": "wrong"}
        )
        assert response.status_code == 401

    def test_sync_vendors(self, client):
        with patch("buildquote.modules.sync.router.SyncService") as mock_svc_cls:
            mock_svc = AsyncMock()
            mock_svc.sync_vendors.return_value = 2
            mock_svc_cls.return_value = mock_svc

            response = client.post(
                "/api/v1/sync/vendors",
                json={"data": [{"Vendor Name": "Acme"}, {"Vendor Name": "BuildCo"}]},
                headers={"X-Sync-Key": "test-sync-key"},
            )

        assert response.status_code == 200
        assert response.json()["synced"] == 2
