"""Tests for pending uploads and manual bill entry."""

from decimal import Decimal
from uuid import uuid4

import pytest

from billtracker.core.errors import PersistenceFailed
from billtracker.models.bill import Bill
from billtracker.models.bill_upload import BillUpload
from billtracker.models.enums import UploadStatus, UtilityType
from billtracker.models.meter import Meter
from billtracker.services import bill_upload as upload_service


@pytest.fixture
def gas_meter(test_db, building):
    meter = Meter(building_id=building.id, label="G7781", utility=UtilityType.GAS)
    test_db.add(meter)
    test_db.commit()
    test_db.refresh(meter)
    return meter


@pytest.fixture
def upload(test_db, building, gas_meter):
    """A pending upload tied to a known gas meter."""
    item = BillUpload(building_id=building.id, meter_id=gas_meter.id, file_name="kgs-2024-03.pdf")
    test_db.add(item)
    test_db.commit()
    test_db.refresh(item)
    return item


@pytest.fixture
def signed_in(client, test_user, user_password):
    client.post(
        "/auth/sign-in",
        data={"email": test_user.email, "password": user_password},
        follow_redirects=False,
    )
    return client


ENTRY = {
    "period_start": "2024-03-01",
    "period_end": "2024-03-31",
    "total_cost": "412.50",
    "usage_mcf": "38.2",
}


class TestPendingUploads:
    """Tests for listing uploads awaiting entry."""

    def test_lists_pending_uploads(self, client, auth_headers, upload):
        response = client.get("/api/uploads/", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert [u["id"] for u in data] == [str(upload.id)]
        assert data[0]["status"] == "pending"

    def test_entered_uploads_are_hidden(self, client, auth_headers, test_db, upload):
        upload.status = UploadStatus.ENTERED
        test_db.commit()
        response = client.get("/api/uploads/", headers=auth_headers)
        assert response.json() == []

    def test_other_tenants_uploads_are_hidden(
        self, client, auth_headers, test_db, foreign_building
    ):
        test_db.add(BillUpload(building_id=foreign_building.id, file_name="theirs.pdf"))
        test_db.commit()
        response = client.get("/api/uploads/", headers=auth_headers)
        assert response.json() == []


class TestManualEntryApi:
    """Tests for POST /api/uploads/{id}/enter."""

    def test_entry_creates_bill_and_marks_entered(
        self, client, auth_headers, test_db, upload, gas_meter
    ):
        response = client.post(
            f"/api/uploads/{upload.id}/enter", json=ENTRY, headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["billsCreated"] == 1
        assert data["results"][0]["meter_id"] == str(gas_meter.id)

        bill = test_db.query(Bill).one()
        assert bill.bill_upload_id == upload.id
        assert bill.total_cost == Decimal("412.50")
        assert bill.usage.usage_mcf == Decimal("38.200")

        test_db.refresh(upload)
        assert upload.status == UploadStatus.ENTERED
        assert upload.entered_at is not None

    def test_reentry_updates_same_bill(self, client, auth_headers, test_db, upload):
        client.post(f"/api/uploads/{upload.id}/enter", json=ENTRY, headers=auth_headers)
        response = client.post(
            f"/api/uploads/{upload.id}/enter",
            json={**ENTRY, "total_cost": "420.00"},
            headers=auth_headers,
        )
        assert response.json()["results"][0]["createdBill"] is False
        assert test_db.query(Bill).one().total_cost == Decimal("420.00")

    def test_demand_exceeding_total_is_rejected(self, client, auth_headers, test_db, upload):
        response = client.post(
            f"/api/uploads/{upload.id}/enter",
            json={**ENTRY, "demand_cost": "500.00"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json() == {
            "ok": False,
            "error": "Demand portion cannot exceed total cost",
        }
        assert test_db.query(Bill).count() == 0

    def test_upload_without_meter_needs_label(self, client, auth_headers, test_db, building):
        bare = BillUpload(building_id=building.id, file_name="scan.pdf")
        test_db.add(bare)
        test_db.commit()
        response = client.post(
            f"/api/uploads/{bare.id}/enter",
            json={**ENTRY, "utility": "gas"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "A meter label is required for this upload"

    def test_unknown_upload(self, client, auth_headers):
        response = client.post(
            f"/api/uploads/{uuid4()}/enter", json=ENTRY, headers=auth_headers
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Upload not found"

    def test_foreign_upload(self, client, auth_headers, test_db, foreign_building):
        theirs = BillUpload(building_id=foreign_building.id, file_name="theirs.pdf")
        test_db.add(theirs)
        test_db.commit()
        response = client.post(
            f"/api/uploads/{theirs.id}/enter", json=ENTRY, headers=auth_headers
        )
        assert response.status_code == 403


class TestManualEntryWeb:
    """Tests for the upload list and entry form pages."""

    def test_list_page(self, signed_in, upload):
        response = signed_in.get("/uploads/")
        assert response.status_code == 200
        assert "kgs-2024-03.pdf" in response.text

    def test_enter_page_requires_session(self, client, upload):
        response = client.get(f"/uploads/{upload.id}/enter", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == (
            f"/auth/sign-in?redirect=%2Fuploads%2F{upload.id}%2Fenter"
        )

    def test_enter_page_prefills_meter(self, signed_in, upload):
        response = signed_in.get(f"/uploads/{upload.id}/enter")
        assert response.status_code == 200
        assert 'value="G7781"' in response.text

    def test_form_submission(self, signed_in, test_db, upload):
        response = signed_in.post(
            f"/uploads/{upload.id}/enter",
            data={**ENTRY, "demand_cost": ""},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/uploads"

        test_db.refresh(upload)
        assert upload.status == UploadStatus.ENTERED
        assert test_db.query(Bill).one().bill_upload_id == upload.id

    def test_form_rejects_demand_above_total(self, signed_in, test_db, upload):
        response = signed_in.post(
            f"/uploads/{upload.id}/enter",
            data={**ENTRY, "demand_cost": "999"},
        )
        assert response.status_code == 400
        assert "Demand portion cannot exceed total cost" in response.text

        test_db.refresh(upload)
        assert upload.status == UploadStatus.PENDING

    def test_foreign_upload_redirects_with_flash(self, signed_in, test_db, foreign_building):
        theirs = BillUpload(building_id=foreign_building.id, file_name="theirs.pdf")
        test_db.add(theirs)
        test_db.commit()
        response = signed_in.get(f"/uploads/{theirs.id}/enter")
        assert response.status_code == 200
        assert "Upload not found or access denied." in response.text

    def test_form_failure_during_save_rerenders_form(
        self, signed_in, test_db, upload, monkeypatch
    ):
        def failing_ingest(db, user, request):
            raise PersistenceFailed("Item 0 commit failed: disk I/O error")

        monkeypatch.setattr(upload_service, "ingest_bills", failing_ingest)

        response = signed_in.post(f"/uploads/{upload.id}/enter", data=ENTRY)
        assert response.status_code == 500
        assert "text/html" in response.headers["content-type"]
        assert "Item 0 commit failed: disk I/O error" in response.text

        test_db.refresh(upload)
        assert upload.status == UploadStatus.PENDING
