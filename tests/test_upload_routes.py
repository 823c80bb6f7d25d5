"""
Tests for the audio upload routes.
"""

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from callcoach_backend.app_config import get_app_config
from callcoach_backend.models.audio_file import AudioFile
from conftest import upload_wav, wav_bytes


class TestUpload:
    """POST /api/upload"""

    async def test_upload_creates_audio_file(self, client, upload_dir):
        data = await upload_wav(client, "support-call.wav", size=10 * 1024)

        assert data["status"] == "uploaded"
        assert data["size"] == 10 * 1024
        assert data["originalName"] == "support-call.wav"
        assert data["mimetype"] == "audio/wav"
        assert data["id"] == data["_id"]
        assert data["filename"].endswith(".wav")
        assert (upload_dir / data["filename"]).stat().st_size == 10 * 1024

    async def test_upload_then_fetch_round_trip(self, client):
        uploaded = await upload_wav(client, "round-trip.wav", size=4096)

        response = await client.get(f"/api/upload/{uploaded['id']}")

        assert response.status_code == 200
        fetched = response.json()["data"]
        assert fetched["originalName"] == uploaded["originalName"]
        assert fetched["mimetype"] == uploaded["mimetype"]
        assert fetched["size"] == uploaded["size"]
        assert fetched["exists"] is True

    async def test_missing_file_is_rejected(self, client):
        response = await client.post("/api/upload", data={"other": "value"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "No file uploaded"

    async def test_wrong_mime_type_is_rejected(self, client, upload_dir):
        response = await client.post(
            "/api/upload",
            files={"audioFile": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert "INVALID_FILE_TYPE" in response.json()["error"]
        assert not upload_dir.exists() or not any(upload_dir.iterdir())

    async def test_wrong_extension_is_rejected(self, client):
        response = await client.post(
            "/api/upload",
            files={"audioFile": ("call.ogg", wav_bytes(1024), "audio/wav")},
        )

        assert response.status_code == 400
        assert "INVALID_FILE_EXTENSION" in response.json()["error"]

    async def test_oversized_upload_is_rejected_and_removed(self, client, upload_dir, monkeypatch):
        monkeypatch.setattr(get_app_config(), "max_file_size", 2048)
        monkeypatch.setattr(get_app_config(), "upload_chunk_size", 512)

        response = await client.post(
            "/api/upload",
            files={"audioFile": ("big.wav", wav_bytes(8192), "audio/wav")},
        )

        assert response.status_code == 413
        assert "FILE_TOO_LARGE" in response.json()["error"]
        assert list(upload_dir.iterdir()) == []
        assert await AudioFile.find_all().count() == 0

    async def test_failed_insert_removes_stored_file(self, client, upload_dir, monkeypatch):
        async def refuse_insert(self, *args, **kwargs):
            raise ServerSelectionTimeoutError("No servers found yet")

        monkeypatch.setattr(AudioFile, "insert", refuse_insert)

        response = await client.post(
            "/api/upload",
            files={"audioFile": ("lost.wav", wav_bytes(4096), "audio/wav")},
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Database error"
        assert list(upload_dir.iterdir()) == []
        assert await AudioFile.find_all().count() == 0


class TestAudioFileManagement:
    async def test_invalid_id_shape_returns_400(self, client):
        response = await client.get("/api/upload/abc")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid file ID format"

    async def test_unknown_id_returns_404(self, client):
        response = await client.get("/api/upload/0123456789abcdef01234567")

        assert response.status_code == 404

    async def test_status_override_has_no_transition_guard(self, client):
        uploaded = await upload_wav(client)

        for status in ("completed", "uploaded", "failed"):
            response = await client.patch(f"/api/upload/{uploaded['id']}/status", json={"status": status})
            assert response.status_code == 200
            assert response.json()["data"]["status"] == status

    async def test_status_override_rejects_unknown_status(self, client):
        uploaded = await upload_wav(client)

        response = await client.patch(f"/api/upload/{uploaded['id']}/status", json={"status": "archived"})

        assert response.status_code == 400
        assert response.json()["message"] == "Validation error"

    async def test_delete_removes_record_and_file(self, client, upload_dir):
        uploaded = await upload_wav(client)
        stored = upload_dir / uploaded["filename"]
        assert stored.exists()

        response = await client.delete(f"/api/upload/{uploaded['id']}")

        assert response.status_code == 200
        assert not stored.exists()
        assert (await client.get(f"/api/upload/{uploaded['id']}")).status_code == 404

    async def test_delete_succeeds_when_file_already_gone(self, client, upload_dir):
        uploaded = await upload_wav(client)
        (upload_dir / uploaded["filename"]).unlink()

        response = await client.delete(f"/api/upload/{uploaded['id']}")

        assert response.status_code == 200

    async def test_list_filters_by_status(self, client):
        first = await upload_wav(client, "a.wav")
        await upload_wav(client, "b.wav")
        await client.patch(f"/api/upload/{first['id']}/status", json={"status": "failed"})

        response = await client.get("/api/upload", params={"status": "failed"})

        body = response.json()
        assert [item["id"] for item in body["data"]] == [first["id"]]
        assert body["pagination"]["totalItems"] == 1

    async def test_stats(self, client):
        await upload_wav(client, "a.wav", size=1024)
        await upload_wav(client, "b.wav", size=2048)

        response = await client.get("/api/upload/stats/overview")

        data = response.json()["data"]
        assert data["database"]["totalFiles"] == 2
        assert data["database"]["totalSizeBytes"] == 3072
        assert data["database"]["byStatus"] == {"uploaded": 2}
        assert data["database"]["byMimetype"] == {"audio/wav": 2}
        assert data["filesystem"]["totalFiles"] == 2
        assert data["filesystem"]["totalSize"] == 3072


class TestPagination:
    @pytest.fixture
    async def eleven_uploads(self, client):
        return [await upload_wav(client, f"call-{i}.wav", size=256) for i in range(11)]

    async def test_pages_respect_limit(self, client, eleven_uploads):
        first = (await client.get("/api/upload", params={"page": 1, "limit": 5})).json()
        last = (await client.get("/api/upload", params={"page": 3, "limit": 5})).json()

        assert len(first["data"]) == 5
        assert first["pagination"] == {
            "current": 1,
            "total": 3,
            "limit": 5,
            "totalItems": 11,
            "hasNext": True,
            "hasPrev": False,
        }
        assert len(last["data"]) == 1
        assert last["pagination"]["hasNext"] is False
        assert last["pagination"]["current"] * last["pagination"]["limit"] >= last["pagination"]["totalItems"]

    async def test_ascending_sort_by_original_name(self, client, eleven_uploads):
        response = await client.get(
            "/api/upload", params={"sortBy": "originalName", "sortOrder": "asc", "limit": 3}
        )

        names = [item["originalName"] for item in response.json()["data"]]
        assert names == sorted(names)
        assert names[0] == "call-0.wav"

    async def test_unknown_sort_field_is_rejected(self, client):
        response = await client.get("/api/upload", params={"sortBy": "notAField"})

        assert response.status_code == 400

    async def test_limit_above_maximum_is_rejected(self, client):
        response = await client.get("/api/upload", params={"limit": 101})

        assert response.status_code == 400
