"""
Unit tests for the hosted image and mail services
"""

import json
import httpx
import pytest
from core.exceptions import ConfigurationError, ImageUploadError
from datetime import date
from services.email import EmailService
from services.images import ImageUploader

UPLOAD_RESPONSE = {
    "public_id": "afreq/2024-01-15/abc123",
    "secure_url": "https://res.cloudinary.com/demo-cloud/image/upload/v1/afreq/2024-01-15/abc123.jpg",
    "url": "http://res.cloudinary.com/demo-cloud/image/upload/v1/afreq/2024-01-15/abc123.jpg",
    "format": "jpg",
    "width": 800,
    "height": 600,
    "bytes": 12345,
}


def uploader_with(handler) -> ImageUploader:
    return ImageUploader("demo-cloud", "unsigned_test", transport=httpx.MockTransport(handler))


class TestImageUploader:
    """Test unsigned uploads"""

    @pytest.mark.asyncio
    async def test_upload_image(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=UPLOAD_RESPONSE)

        uploaded = await uploader_with(handler).upload_image("box.jpg", b"\xff\xd8jpeg", "image/jpeg")

        assert uploaded.public_id == "afreq/2024-01-15/abc123"
        assert uploaded.secure_url.startswith("https://")
        assert str(seen[0].url) == "https://api.cloudinary.com/v1_1/demo-cloud/image/upload"
        body = seen[0].content
        assert b'name="upload_preset"' in body
        assert b"unsigned_test" in body
        assert b'filename="box.jpg"' in body

    @pytest.mark.asyncio
    async def test_bulk_upload_uses_daily_folder_and_keeps_order(self):
        seen = []

        def handler(request):
            seen.append(request.content)
            name = b"a.jpg" if b'filename="a.jpg"' in request.content else b"b.jpg"
            return httpx.Response(200, json={**UPLOAD_RESPONSE, "public_id": name.decode()})

        uploaded = await uploader_with(handler).upload_bulk_images(
            [("a.jpg", b"a", "image/jpeg"), ("b.jpg", b"b", "image/jpeg")],
            upload_date=date(2024, 1, 15),
        )

        assert [u.public_id for u in uploaded] == ["a.jpg", "b.jpg"]
        assert all(b"afreq/2024-01-15" in content for content in seen)

    @pytest.mark.asyncio
    async def test_rejected_upload(self):
        uploader = uploader_with(lambda request: httpx.Response(400, json={"error": {"message": "Bad preset"}}))

        with pytest.raises(ImageUploadError) as exc_info:
            await uploader.upload_image("box.jpg", b"x")

        assert exc_info.value.context["status_code"] == 400

    @pytest.mark.asyncio
    async def test_unconfigured_uploader(self):
        with pytest.raises(ConfigurationError):
            await ImageUploader("", "").upload_image("box.jpg", b"x")

    def test_delivery_urls(self):
        uploader = ImageUploader("demo-cloud", "unsigned_test")
        assert uploader.get_image_url("afreq/x") == "https://res.cloudinary.com/demo-cloud/image/upload/afreq/x"
        assert uploader.get_thumbnail_url("afreq/x", size=150) == (
            "https://res.cloudinary.com/demo-cloud/image/upload/w_150,h_150,c_thumb,q_auto,f_auto/afreq/x"
        )


class TestEmailService:
    """Test the mail fallback chain"""

    def test_credentials_email_content(self, test_settings):
        message = EmailService(config=test_settings).render_credentials_email(
            "Ama Mensah", "ama@example.com", "TEMP1234"
        )

        assert message.to == "ama@example.com"
        assert message.subject == "Your AFREQ Logistics Account - Login Credentials"
        assert "TEMP1234" in message.text
        assert "https://tracker.test/login" in message.text
        assert "TEMP1234" in message.html

    def test_html_is_escaped(self, test_settings):
        message = EmailService(config=test_settings).render_credentials_email(
            "<script>alert(1)</script>", "x@example.com", "TEMP1234"
        )
        assert "<script>" not in message.html

    @pytest.mark.asyncio
    async def test_mail_endpoint_first(self, test_settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        service = EmailService(config=test_settings, transport=httpx.MockTransport(handler))
        sent = await service.send_customer_credentials_email("Ama", "ama@example.com", "TEMP1234")

        assert sent is True
        assert len(seen) == 1
        assert str(seen[0].url) == "https://mail.test/send"
        payload = json.loads(seen[0].content)
        assert set(payload) == {"to", "subject", "html", "text"}

    @pytest.mark.asyncio
    async def test_falls_back_to_emailjs(self, test_settings):
        test_settings.EMAILJS_SERVICE_ID = "service_x"
        test_settings.EMAILJS_TEMPLATE_ID = "template_x"
        test_settings.EMAILJS_PUBLIC_KEY = "public_x"
        seen = []

        def handler(request):
            seen.append(request)
            if request.url.host == "mail.test":
                return httpx.Response(500, text="boom")
            return httpx.Response(200, text="OK")

        service = EmailService(config=test_settings, transport=httpx.MockTransport(handler))
        sent = await service.send_customer_credentials_email("Ama", "ama@example.com", "TEMP1234")

        assert sent is True
        assert [r.url.host for r in seen] == ["mail.test", "api.emailjs.com"]
        payload = json.loads(seen[1].content)
        assert payload["service_id"] == "service_x"
        assert payload["template_params"]["temporary_password"] == "TEMP1234"

    @pytest.mark.asyncio
    async def test_logs_transcript_when_nothing_works(self, test_settings, caplog):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        service = EmailService(config=test_settings, transport=httpx.MockTransport(handler))
        sent = await service.send_customer_credentials_email("Ama", "ama@example.com", "TEMP1234")

        assert sent is False
        assert "Transcript follows" in caplog.text
        assert "TEMP1234" in caplog.text

    @pytest.mark.asyncio
    async def test_unconfigured_endpoint_logs_reset_email(self, test_settings, caplog):
        test_settings.MAIL_ENDPOINT_URL = None
        service = EmailService(config=test_settings)

        sent = await service.send_password_reset_email("Ama", "ama@example.com", "https://tracker.test/reset?token=t")

        assert sent is False
        assert "https://tracker.test/reset?token=t" in caplog.text
