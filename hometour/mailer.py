from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

import resend
from resend.exceptions import ResendError

from .config import Settings

logger = logging.getLogger(__name__)


def build_text_body(record: Mapping[str, object], summary: str, address: str) -> str:
    return "\n".join(
        [
            summary,
            "",
            f"Address: {address}",
            f"Date: {record.get('date') or ''}",
            f"Recipient: {record.get('email') or '(missing)'}",
            "",
            "Full notes are attached as a PDF.",
        ]
    )


def build_email_params(
    settings: Settings,
    record: Mapping[str, object],
    summary: str,
    address: str,
    pdf_bytes: bytes,
    filename: str,
) -> Dict[str, Any]:
    recipient = record.get("email") or settings.resend_from
    params: Dict[str, Any] = {
        "from": settings.resend_from,
        "to": [recipient],
        "subject": f"Your Home Tour Notes - {address}",
        "text": build_text_body(record, summary, address),
        "attachments": [{"filename": filename, "content": list(pdf_bytes)}],
    }
    bcc: List[str] = [entry for entry in settings.report_bcc if entry]
    if bcc:
        params["bcc"] = bcc
    return params


def send_report_email(
    settings: Settings,
    record: Mapping[str, object],
    summary: str,
    address: str,
    pdf_bytes: bytes,
    filename: str,
) -> Dict[str, Any]:
    """Send the report through Resend.

    Returns ``{"ok": True, "message_id": ...}`` or ``{"ok": False, "error": ...}``;
    provider errors are reported, not raised.
    """
    if not settings.resend_api_key:
        return {"ok": False, "error": "Email service is not configured."}

    resend.api_key = settings.resend_api_key
    params = build_email_params(settings, record, summary, address, pdf_bytes, filename)
    try:
        response = resend.Emails.send(params)
    except ResendError as exc:
        logger.warning("Resend rejected the report email: %s", exc)
        return {"ok": False, "error": str(exc) or "Email send failed"}

    if response and "id" in response:
        return {"ok": True, "message_id": response["id"]}
    return {"ok": False, "error": f"Unexpected response from Resend: {response}"}
