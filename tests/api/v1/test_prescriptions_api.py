from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from pharmacy.core.config import settings
from pharmacy.core.exceptions import ValidationError
from pharmacy.utils.uploads import save_image


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


def prescription_doc(uploaded_by, image_path="uploads/prescriptions/rx.png", **overrides) -> dict:
    doc = {
        "_id": ObjectId(),
        "patient_name": "Sita Thapa",
        "doctor_name": "Dr. Koirala",
        "status": "pending",
        "image_path": image_path,
        "original_filename": "rx.png",
        "uploaded_by": uploaded_by,
    }
    doc.update(overrides)
    return doc


@pytest.mark.asyncio
async def test_upload_prescription(client, mock_db, login_as, staff_user, upload_dir):
    login_as(staff_user)
    mock_db["prescriptions"].insert_one.return_value = MagicMock(inserted_id=ObjectId())

    response = await client.post(
        "/api/v1/prescriptions/upload",
        files={"file": ("rx.PNG", b"\x89PNG fake image", "image/png")},
        data={"patient_name": " Sita Thapa ", "doctor_name": "Dr. Koirala"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["patient_name"] == "Sita Thapa"
    assert data["status"] == "pending"
    assert data["uploaded_by"] == str(staff_user.id)
    stored = Path(data["image_path"])
    assert stored.parent == upload_dir / "prescriptions"
    assert stored.suffix == ".png"
    assert stored.read_bytes() == b"\x89PNG fake image"


@pytest.mark.asyncio
async def test_upload_rejects_non_image(client, mock_db, login_as, staff_user, upload_dir):
    login_as(staff_user)

    response = await client.post(
        "/api/v1/prescriptions/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        data={"patient_name": "Sita Thapa", "doctor_name": "Dr. Koirala"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Only image files are allowed"
    mock_db["prescriptions"].insert_one.assert_not_called()


@pytest.mark.asyncio
async def test_upload_rejects_large_file(client, login_as, staff_user, upload_dir, monkeypatch):
    login_as(staff_user)
    monkeypatch.setattr(settings, "MAX_FILE_SIZE", 10)

    response = await client.post(
        "/api/v1/prescriptions/upload",
        files={"file": ("rx.jpg", b"x" * 11, "image/jpeg")},
        data={"patient_name": "Sita Thapa", "doctor_name": "Dr. Koirala"},
    )

    assert response.status_code == 400
    assert not (upload_dir / "prescriptions").exists()


@pytest.mark.asyncio
async def test_upload_viewer_forbidden(client, login_as, viewer_user, upload_dir):
    login_as(viewer_user)

    response = await client.post(
        "/api/v1/prescriptions/upload",
        files={"file": ("rx.png", b"img", "image/png")},
        data={"patient_name": "Sita Thapa", "doctor_name": "Dr. Koirala"},
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_scoped_with_status_filter(client, mock_db, login_as, staff_user):
    login_as(staff_user)
    mock_db["prescriptions"].find.return_value.to_list.return_value = [prescription_doc(staff_user.id)]

    response = await client.get("/api/v1/prescriptions/", params={"status": "pending"})

    assert response.status_code == 200
    assert len(response.json()) == 1
    query = mock_db["prescriptions"].find.call_args[0][0]
    assert query == {"uploaded_by": staff_user.id, "status": "pending"}


@pytest.mark.asyncio
async def test_get_other_users_prescription_forbidden(client, mock_db, login_as, staff_user):
    login_as(staff_user)
    doc = prescription_doc(ObjectId())
    mock_db["prescriptions"].find_one.return_value = doc

    response = await client.get(f"/api/v1/prescriptions/{doc['_id']}")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_review_requires_admin(client, login_as, staff_user):
    login_as(staff_user)

    response = await client.put(
        f"/api/v1/prescriptions/{ObjectId()}/status", json={"status": "approved"}
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_review_records_reviewer(client, mock_db, login_as, admin_user):
    login_as(admin_user)
    doc = prescription_doc(ObjectId(), status="approved", reviewed_by=admin_user.id)
    mock_db["prescriptions"].find_one_and_update.return_value = doc

    response = await client.put(
        f"/api/v1/prescriptions/{doc['_id']}/status", json={"status": "approved"}
    )

    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    update = mock_db["prescriptions"].find_one_and_update.call_args[0][1]["$set"]
    assert update["reviewed_by"] == admin_user.id
    assert update["reviewed_at"] is not None


@pytest.mark.asyncio
async def test_delete_own_prescription_removes_file(client, mock_db, login_as, staff_user, upload_dir):
    login_as(staff_user)
    image = upload_dir / "rx.png"
    image.write_bytes(b"img")
    doc = prescription_doc(staff_user.id, image_path=str(image))
    mock_db["prescriptions"].find_one.return_value = doc
    mock_db["prescriptions"].find_one_and_delete.return_value = doc

    response = await client.delete(f"/api/v1/prescriptions/{doc['_id']}")

    assert response.status_code == 200
    assert not image.exists()


@pytest.mark.asyncio
async def test_upload_reads_at_most_one_byte_past_limit(monkeypatch, upload_dir):
    monkeypatch.setattr(settings, "MAX_FILE_SIZE", 10)
    file = MagicMock(content_type="image/png", filename="rx.png")
    file.read = AsyncMock(return_value=b"x" * 11)

    with pytest.raises(ValidationError):
        await save_image(file)

    file.read.assert_called_once_with(11)
