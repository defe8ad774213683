"""Tests for Airtable lead saving, media transfer and operator SMS."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import cloudinary.exceptions
import cloudinary.uploader
import httpx
import pytest

from leadcatcher.crm.airtable import AirtableLeadStore
from leadcatcher.errors import MediaProcessingError
from leadcatcher.media.cloudinary import CloudinaryStorage, UploadedMedia, resource_type_for
from leadcatcher.media.ingest import MediaIngestor
from leadcatcher.notifications import OperatorNotifier
from leadcatcher.session.models import MediaReference


def airtable(handler, media=None, notifier=None):
    return AirtableLeadStore(
        "key",
        "appBase",
        "tblLeads",
        media=media,
        notifier=notifier,
        base_url="https://airtable.test/v0",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def created(request):
    return httpx.Response(200, json={"records": [{"id": "rec42"}]})


class TestAirtableLeadStore:
    @pytest.mark.asyncio
    async def test_requires_name_and_phone(self, notifier):
        store = airtable(created, notifier=notifier)

        result = await store.save_lead({"phone": "49151"})

        assert result.success is False
        assert "required" in result.error
        notifier.notify.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_record_fields(self, notifier):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            assert str(request.url) == "https://airtable.test/v0/appBase/tblLeads"
            return created(request)

        store = airtable(handler, notifier=notifier)
        result = await store.save_lead({"name": "Ada", "phone": "49151", "country": "UK"})

        assert result.success is True
        assert result.record_id == "rec42"
        fields = bodies[0]["records"][0]["fields"]
        assert fields["Name"] == "Ada"
        assert fields["Country"] == "UK"
        assert fields["Email"] == ""
        assert "Date Created" in fields
        assert "Attachments" not in fields

    @pytest.mark.asyncio
    async def test_attachments_from_media(self, notifier):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return created(request)

        media = MagicMock()
        media.transfer = AsyncMock(return_value=["https://cdn.test/a.jpg"])
        store = airtable(handler, media=media, notifier=notifier)

        result = await store.save_lead(
            {"name": "Ada", "phone": "49151"}, [MediaReference("m1", "image/jpeg")]
        )

        assert result.attachments == 1
        assert bodies[0]["records"][0]["fields"]["Attachments"] == [{"url": "https://cdn.test/a.jpg"}]

    @pytest.mark.asyncio
    async def test_all_media_failing_still_saves_lead(self, notifier):
        media = MagicMock()
        media.transfer = AsyncMock(side_effect=MediaProcessingError("All 1 media uploads failed"))
        store = airtable(created, media=media, notifier=notifier)

        result = await store.save_lead(
            {"name": "Ada", "phone": "49151"}, [MediaReference("m1", "image/jpeg")]
        )

        assert result.success is True
        assert result.media_failed is True

    @pytest.mark.asyncio
    async def test_http_error_becomes_failure(self, notifier):
        store = airtable(lambda request: httpx.Response(422, text="INVALID_VALUE"), notifier=notifier)

        result = await store.save_lead({"name": "Ada", "phone": "49151"})

        assert result.success is False
        assert "422" in result.error
        assert result.to_dict()["success"] is False


class TestMediaIngestor:
    @pytest.mark.asyncio
    async def test_partial_failure_skips_failed_items(self):
        async def download(media_id):
            if media_id == "bad":
                raise RuntimeError("gone")
            return b"data"

        storage = MagicMock()
        storage.upload = AsyncMock(return_value=UploadedMedia("https://cdn.test/ok.jpg", "ok"))
        ingestor = MediaIngestor(download, storage)

        urls = await ingestor.transfer([MediaReference("good", "image/jpeg"), MediaReference("bad", "image/jpeg")])

        assert urls == ["https://cdn.test/ok.jpg"]

    @pytest.mark.asyncio
    async def test_total_failure_raises(self):
        download = AsyncMock(side_effect=RuntimeError("gone"))
        ingestor = MediaIngestor(download, MagicMock())

        with pytest.raises(MediaProcessingError):
            await ingestor.transfer([MediaReference("bad", "image/jpeg")])

    @pytest.mark.asyncio
    async def test_nothing_to_transfer(self):
        ingestor = MediaIngestor(AsyncMock(), MagicMock())
        assert await ingestor.transfer([]) == []


class TestCloudinaryStorage:
    def test_resource_type_for(self):
        assert resource_type_for("image/png") == "image"
        assert resource_type_for("video/mp4") == "video"
        assert resource_type_for("application/pdf") == "auto"
        assert resource_type_for(None) == "auto"

    @pytest.mark.asyncio
    async def test_upload_goes_through_sdk(self, monkeypatch):
        calls = []

        def fake_upload(file, **options):
            calls.append((file.read(), options))
            return {"secure_url": "https://res.cloudinary.test/a.jpg", "public_id": "whatsapp-uploads/a"}

        monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
        storage = CloudinaryStorage("demo", "key", "secret", folder="whatsapp-uploads")

        uploaded = await storage.upload(b"jpeg-bytes", "image/jpeg")

        assert uploaded == UploadedMedia("https://res.cloudinary.test/a.jpg", "whatsapp-uploads/a")
        data, options = calls[0]
        assert data == b"jpeg-bytes"
        assert options["resource_type"] == "image"
        assert options["folder"] == "whatsapp-uploads"
        assert options["cloud_name"] == "demo"

    @pytest.mark.asyncio
    async def test_sdk_error_propagates(self, monkeypatch):
        def fake_upload(file, **options):
            raise cloudinary.exceptions.Error("Invalid API key")

        monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
        storage = CloudinaryStorage("demo", "key", "bad")

        with pytest.raises(cloudinary.exceptions.Error):
            await storage.upload(b"data", "video/mp4")


def twilio_client(fail_for=()):
    """MagicMock standing in for ``twilio.rest.Client``."""

    def create(body, from_, to):
        if to in fail_for:
            raise RuntimeError("bad number")
        return SimpleNamespace(sid="SM1")

    client = MagicMock()
    client.messages.create.side_effect = create
    return client


class TestOperatorNotifier:
    @pytest.mark.asyncio
    async def test_not_configured_is_a_no_op(self):
        notifier = OperatorNotifier(None, None, None, [])
        result = await notifier.notify("hello", "49151")
        assert result["success"] is False

    @pytest.mark.asyncio
    async def test_sends_to_every_number(self):
        client = twilio_client()
        notifier = OperatorNotifier("AC1", "auth", "+100", ["+491", "+492"], client=client, delay_seconds=0)

        result = await notifier.notify("Lead successfully saved", "49151")

        assert result["success"] is True
        assert len(result["results"]) == 2
        client.messages.create.assert_any_call(
            body="Lead successfully saved, Lead phone number: 49151", from_="+100", to="+491"
        )

    @pytest.mark.asyncio
    async def test_one_failure_is_reported_not_raised(self):
        notifier = OperatorNotifier(
            "AC1", "auth", "+100", ["+491", "+492"], client=twilio_client(fail_for={"+492"}), delay_seconds=0
        )

        result = await notifier.notify("oops", "49151")

        assert result["success"] is False
        assert [r["success"] for r in result["results"]] == [True, False]
