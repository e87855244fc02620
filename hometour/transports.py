from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

import httpx

from .config import Settings
from .results import PdfArtifact, StepResult
from .survey import DEFAULT_FILENAME, sanitize_filename

logger = logging.getLogger(__name__)


def report_subject(address: object) -> str:
    return f"Your Home Tour Notes - {address or ''}"


def server_payload(
    record: Mapping[str, object],
    overall_score: float,
    summary: str,
    artifact: PdfArtifact | None = None,
) -> Dict[str, object]:
    payload: Dict[str, object] = {
        key: list(value) if isinstance(value, tuple) else value for key, value in record.items()
    }
    payload["meta"] = {"overallScore": overall_score, "summary": summary}
    if artifact is not None:
        payload["clientPdfBase64"] = artifact.pdf_base64
        payload["clientPdfFilename"] = artifact.filename
    return payload


class EmailJSTransport:
    """Direct send through the EmailJS REST API with the PDF attached."""

    name = "emailjs"

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self.client = client

    def build_request(self, record: Mapping[str, object], summary: str, artifact: PdfArtifact) -> Dict[str, object]:
        return {
            "service_id": self.settings.emailjs_service_id,
            "template_id": self.settings.emailjs_template_id,
            "user_id": self.settings.emailjs_public_key,
            "template_params": {
                "to_email": record.get("email") or "",
                "bcc_email": self.settings.emailjs_bcc or "",
                "subject": report_subject(record.get("address")),
                "message_html": summary or "",
                "attachment": artifact.data_uri,
                "address": record.get("address") or "",
                "date": record.get("date") or "",
            },
        }

    async def send(self, record: Mapping[str, object], summary: str, artifact: PdfArtifact) -> StepResult[None]:
        if not self.settings.emailjs_configured:
            return StepResult.failure("EmailJS is not configured")
        body = self.build_request(record, summary, artifact)
        try:
            if self.client is not None:
                response = await self.client.post(self.settings.emailjs_url, json=body)
            else:
                async with httpx.AsyncClient(timeout=self.settings.delivery_timeout) as client:
                    response = await client.post(self.settings.emailjs_url, json=body)
        except httpx.HTTPError as exc:
            return StepResult.failure(f"EmailJS request failed: {exc!r}")
        if response.status_code != 200:
            return StepResult.failure(f"EmailJS returned {response.status_code}: {response.text[:200]}")
        return StepResult.success()


class ServerTransport:
    """Posts the record (and the client PDF, when there is one) to the send endpoint."""

    name = "server"

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self.client = client

    async def send(
        self,
        record: Mapping[str, object],
        overall_score: float,
        summary: str,
        artifact: PdfArtifact | None = None,
    ) -> StepResult[PdfArtifact]:
        payload = server_payload(record, overall_score, summary, artifact)
        url = self.settings.send_endpoint_url
        try:
            if self.client is not None:
                response = await self.client.post(url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.settings.delivery_timeout) as client:
                    response = await client.post(url, json=payload)
            result = response.json()
        except httpx.HTTPError as exc:
            return StepResult.failure(f"send endpoint request failed: {exc!r}")
        except ValueError as exc:
            return StepResult.failure(f"send endpoint returned invalid JSON: {exc}")

        if not isinstance(result, dict):
            return StepResult.failure("send endpoint returned an unexpected body")
        if result.get("success"):
            return StepResult.success()

        returned: Optional[PdfArtifact] = None
        if result.get("pdfBase64"):
            filename = sanitize_filename(str(result.get("filename") or DEFAULT_FILENAME))
            returned = PdfArtifact(pdf_base64=str(result["pdfBase64"]), filename=filename)
        error = str(result.get("error") or f"send endpoint returned {response.status_code}")
        return StepResult.failure(error, returned)
