from __future__ import annotations

import base64
import json
import logging
from io import BytesIO
from pathlib import Path
from typing import Dict, Tuple

import click
from flask import Flask, jsonify, request, send_file

from hometour.config import load_settings
from hometour.delivery import submit_survey
from hometour.mailer import send_report_email
from hometour.report import render_report_pdf
from hometour.scoring import build_summary, compute_overall_score, score_record
from hometour.survey import (
    DEFAULT_FILENAME,
    UNTITLED_ADDRESS,
    new_record,
    report_filename,
    sanitize_filename,
)

app = Flask(__name__)
app.config["SETTINGS"] = load_settings()

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def read_record() -> Dict[str, object] | None:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def get_meta(data: Dict[str, object]) -> Dict[str, object]:
    meta = data.get("meta") or {}
    if not isinstance(meta, dict):
        raise ValueError("meta must be an object")
    return meta


def build_pdf_payload(data: Dict[str, object]) -> Tuple[str, bytes]:
    """Use the client's PDF when it sent one, otherwise render it here."""
    client_pdf = data.get("clientPdfBase64")
    if client_pdf:
        pdf_base64 = str(client_pdf)
        return pdf_base64, base64.b64decode(pdf_base64)

    meta = get_meta(data)
    pdf_bytes = render_report_pdf(data, str(meta.get("summary") or ""), meta.get("overallScore"))
    return base64.b64encode(pdf_bytes).decode("ascii"), pdf_bytes


@app.route("/api/send-form-email", methods=ALL_METHODS)
def send_form_email():
    if request.method != "POST":
        return jsonify({"success": False, "error": "Method Not Allowed"}), 405

    data = read_record() or {}
    try:
        meta = get_meta(data)
    except ValueError as exc:
        return jsonify({"success": False, "error": str(exc)}), 400

    settings = app.config["SETTINGS"]
    try:
        address = str(data.get("address") or UNTITLED_ADDRESS)
        summary = str(meta.get("summary") or "")
        filename = sanitize_filename(
            str(data.get("clientPdfFilename") or report_filename(address, data.get("date")))  # type: ignore[arg-type]
        )
        pdf_base64, pdf_bytes = build_pdf_payload(data)

        result = send_report_email(settings, data, summary, address, pdf_bytes, filename)
        if not result["ok"]:
            app.logger.warning("Report email for %s failed: %s", address, result["error"])
            return (
                jsonify(
                    {
                        "success": False,
                        "error": result.get("error") or "Email send failed",
                        "pdfBase64": pdf_base64,
                        "filename": filename,
                    }
                ),
                500,
            )
        return jsonify({"success": True})
    except Exception as exc:
        app.logger.exception("Unexpected error while sending the report email")
        pdf_base64 = None
        filename = DEFAULT_FILENAME
        try:
            filename = report_filename(data.get("address"), data.get("date"))  # type: ignore[arg-type]
            pdf_base64, _ = build_pdf_payload(data)
        except Exception:
            app.logger.exception("Fallback PDF could not be built")
        return (
            jsonify(
                {
                    "success": False,
                    "error": str(exc) or "Unexpected error",
                    "pdfBase64": pdf_base64,
                    "filename": filename,
                }
            ),
            500,
        )


@app.post("/api/score")
def score():
    data = read_record()
    if data is None:
        return jsonify({"error": "Expected a JSON object"}), 400
    return jsonify(score_record(data))


@app.post("/export/pdf")
def export_pdf():
    data = read_record()
    if data is None:
        return ("Expected a JSON survey record.", 400)

    pdf_bytes = render_report_pdf(data, build_summary(data), compute_overall_score(data))
    filename = report_filename(data.get("address"), data.get("date"))  # type: ignore[arg-type]
    return send_file(
        BytesIO(pdf_bytes),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=filename,
    )


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.cli.command("submit")
@click.argument("record_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def submit_command(record_file: Path) -> None:
    """Deliver the tour report for RECORD_FILE (a JSON survey record)."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    record = new_record()
    record.update(json.loads(record_file.read_text(encoding="utf-8")))
    report = submit_survey(record, app.config["SETTINGS"])

    click.echo(f"Outcome: {report.outcome.value}")
    if report.channel:
        click.echo(f"Channel: {report.channel}")
    if report.saved_path:
        click.echo(f"Saved to: {report.saved_path}")
    for step, ok, error in report.attempts:
        click.echo(f"  {step}: {'ok' if ok else 'failed'}" + (f" ({error})" if error else ""))


if __name__ == "__main__":
    app.run(debug=True, port=5001)
