from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
FONT_DIR = BASE_DIR / "fonts"
LOGO_PATH = BASE_DIR / "static" / "logo.png"

DEFAULT_FROM = "Justin@walterhq.com"
DEFAULT_BCC = ("tour@Walterhq.com", "26642713@bcc.eu1.hubspot.com")
EMAILJS_DEFAULT_URL = "https://api.emailjs.com/api/v1.0/email/send"


def _split_list(value: str | None) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    resend_api_key: Optional[str] = None
    resend_from: str = DEFAULT_FROM
    report_bcc: List[str] = field(default_factory=lambda: list(DEFAULT_BCC))
    emailjs_url: str = EMAILJS_DEFAULT_URL
    emailjs_service_id: Optional[str] = None
    emailjs_template_id: Optional[str] = None
    emailjs_public_key: Optional[str] = None
    emailjs_bcc: Optional[str] = None
    send_endpoint_url: str = "http://127.0.0.1:5001/api/send-form-email"
    download_dir: Path = Path.home() / "Downloads"
    delivery_timeout: float = 30.0
    snapshot_step_timeout: float = 10.0

    @property
    def emailjs_configured(self) -> bool:
        return bool(self.emailjs_service_id and self.emailjs_template_id and self.emailjs_public_key)


def load_settings(env_file: str | os.PathLike | None = None) -> Settings:
    load_dotenv(env_file)
    bcc = os.getenv("REPORT_BCC")
    return Settings(
        resend_api_key=os.getenv("RESEND_API_KEY") or None,
        resend_from=os.getenv("RESEND_FROM") or DEFAULT_FROM,
        report_bcc=_split_list(bcc) if bcc is not None else list(DEFAULT_BCC),
        emailjs_url=os.getenv("EMAILJS_URL") or EMAILJS_DEFAULT_URL,
        emailjs_service_id=os.getenv("EMAILJS_SERVICE_ID") or None,
        emailjs_template_id=os.getenv("EMAILJS_TEMPLATE_ID") or None,
        emailjs_public_key=os.getenv("EMAILJS_PUBLIC_KEY") or None,
        emailjs_bcc=os.getenv("EMAILJS_BCC") or None,
        send_endpoint_url=os.getenv("SEND_ENDPOINT_URL") or Settings.send_endpoint_url,
        download_dir=Path(os.getenv("DOWNLOAD_DIR") or Settings().download_dir).expanduser(),
        delivery_timeout=_float_env("DELIVERY_TIMEOUT_SECONDS", 30.0),
        snapshot_step_timeout=_float_env("SNAPSHOT_STEP_TIMEOUT_SECONDS", 10.0),
    )
