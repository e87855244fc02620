import asyncio
import base64
import json

import httpx

from hometour.config import Settings
from hometour.results import PdfArtifact
from hometour.transports import EmailJSTransport, ServerTransport, server_payload

SETTINGS = Settings(
    emailjs_service_id="service_x",
    emailjs_template_id="template_x",
    emailjs_public_key="public_x",
    emailjs_bcc="tours@example.com",
    send_endpoint_url="http://testserver/api/send-form-email",
)
ARTIFACT = PdfArtifact.from_bytes(b"%PDF-1.4 client", "Home-Tour-Notes_Kade 3_.pdf")
RECORD = {"email": "buyer@example.com", "address": "Kade 3", "date": "", "livingPhotos": ("a",)}


def run_with(handler, transport_cls, *args, settings=SETTINGS):
    async def runner():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await transport_cls(settings, client).send(*args)

    return asyncio.run(runner())


def test_emailjs_posts_template_params():
    captured = {}

    def handler(request):
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, text="OK")

    result = run_with(handler, EmailJSTransport, RECORD, "summary", ARTIFACT)

    assert result.ok
    assert captured["url"] == SETTINGS.emailjs_url
    params = captured["body"]["template_params"]
    assert captured["body"]["service_id"] == "service_x"
    assert params["to_email"] == "buyer@example.com"
    assert params["bcc_email"] == "tours@example.com"
    assert params["subject"] == "Your Home Tour Notes - Kade 3"
    assert params["attachment"].startswith("data:application/pdf;base64,")


def test_emailjs_error_status_is_a_failure():
    result = run_with(lambda request: httpx.Response(400, text="bad"), EmailJSTransport, RECORD, "", ARTIFACT)
    assert not result.ok
    assert "400" in result.error


def test_emailjs_without_configuration_fails_fast():
    def handler(request):
        raise AssertionError("no request expected")

    result = run_with(handler, EmailJSTransport, RECORD, "", ARTIFACT, settings=Settings())
    assert not result.ok


def test_server_payload_carries_meta_and_client_pdf():
    payload = server_payload(RECORD, 3.4, "summary", ARTIFACT)
    assert payload["meta"] == {"overallScore": 3.4, "summary": "summary"}
    assert payload["clientPdfBase64"] == ARTIFACT.pdf_base64
    assert payload["clientPdfFilename"] == ARTIFACT.filename
    assert payload["livingPhotos"] == ["a"]
    assert "clientPdfBase64" not in server_payload(RECORD, 3.4, "summary")


def test_server_success():
    captured = {}

    def handler(request):
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True})

    result = run_with(handler, ServerTransport, RECORD, 3.4, "summary", ARTIFACT)
    assert result.ok
    assert captured["body"]["address"] == "Kade 3"


def test_server_failure_returns_its_pdf():
    pdf = base64.b64encode(b"%PDF-1.4 server").decode("ascii")

    def handler(request):
        return httpx.Response(500, json={"success": False, "error": "quota", "pdfBase64": pdf, "filename": "a/b.pdf"})

    result = run_with(handler, ServerTransport, RECORD, 3.4, "summary")
    assert not result.ok
    assert result.error == "quota"
    assert result.value.filename == "a_b.pdf"
    assert result.value.pdf_bytes == b"%PDF-1.4 server"


def test_server_failure_without_pdf():
    result = run_with(lambda request: httpx.Response(500, json={"success": False}), ServerTransport, RECORD, 0, "")
    assert not result.ok
    assert result.value is None


def test_server_network_error_is_a_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = run_with(handler, ServerTransport, RECORD, 0, "")
    assert not result.ok
    assert result.value is None


def test_server_non_json_response_is_a_failure():
    result = run_with(lambda request: httpx.Response(502, text="<html>Bad gateway</html>"), ServerTransport, RECORD, 0, "")
    assert not result.ok
