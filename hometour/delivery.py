"""Submission flow for a finished tour.

Render the PDF on the client side when possible, email it directly, fall back
to the send endpoint, and keep a local copy when nothing remote works. No
failure leaves this module: every step reports a ``StepResult`` and the worst
case is the ``SAVED_LOCALLY_FLAG`` outcome.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Mapping, Optional, Protocol

from .config import Settings, load_settings
from .download import LocalSaver
from .navigation import WizardNavigator
from .results import DeliveryReport, Outcome, PdfArtifact, StepResult
from .scoring import build_summary, compute_overall_score
from .snapshot import SnapshotRenderer
from .survey import freeze_record
from .transports import EmailJSTransport, ServerTransport

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    def render(self, record: Mapping[str, object], summary: str) -> Awaitable[StepResult[PdfArtifact]]: ...


class PrimaryTransport(Protocol):
    def send(
        self, record: Mapping[str, object], summary: str, artifact: PdfArtifact
    ) -> Awaitable[StepResult[None]]: ...


class SecondaryTransport(Protocol):
    def send(
        self,
        record: Mapping[str, object],
        overall_score: float,
        summary: str,
        artifact: Optional[PdfArtifact] = None,
    ) -> Awaitable[StepResult[PdfArtifact]]: ...


class Saver(Protocol):
    def save(self, artifact: PdfArtifact) -> Optional[str]: ...


class DeliveryPipeline:
    def __init__(
        self,
        renderer: Renderer,
        primary: PrimaryTransport,
        secondary: SecondaryTransport,
        saver: Saver,
        timeout: float | None = 30.0,
    ) -> None:
        self.renderer = renderer
        self.primary = primary
        self.secondary = secondary
        self.saver = saver
        self.timeout = timeout

    async def _attempt(
        self, report: DeliveryReport, step: str, call: Callable[[], Awaitable[StepResult]]
    ) -> StepResult:
        try:
            result = await asyncio.wait_for(call(), self.timeout)
        except asyncio.TimeoutError:
            result = StepResult.failure(f"{step} timed out after {self.timeout}s")
        except Exception as exc:
            result = StepResult.failure(f"{step} raised {exc!r}")
        report.attempts.append((step, result.ok, result.error))
        if not result.ok:
            logger.warning("%s failed: %s", step, result.error)
        return result

    def _keep_locally(self, report: DeliveryReport, artifact: PdfArtifact) -> DeliveryReport:
        report.artifact = artifact
        try:
            location = self.saver.save(artifact)
        except Exception:
            logger.exception("Local save raised")
            location = None
        report.attempts.append(("local_download", location is not None, None if location else "no strategy worked"))
        if location is None:
            report.outcome = Outcome.SAVED_LOCALLY_FLAG
            return report
        report.outcome = Outcome.LOCAL_DOWNLOAD
        report.saved_path = location
        return report

    async def submit(self, record: Mapping[str, object]) -> DeliveryReport:
        report = DeliveryReport(outcome=Outcome.SAVED_LOCALLY_FLAG)
        try:
            return await self._submit(freeze_record(record), report)
        except Exception:
            logger.exception("Unexpected error while delivering the tour report")
            report.outcome = Outcome.SAVED_LOCALLY_FLAG
            report.channel = None
            return report

    async def _submit(self, record: Mapping[str, object], report: DeliveryReport) -> DeliveryReport:
        overall_score = compute_overall_score(record)
        summary = build_summary(record)

        rendered = await self._attempt(report, "client_pdf", lambda: self.renderer.render(record, summary))
        if not rendered.ok or rendered.value is None:
            sent = await self._attempt(
                report, "secondary", lambda: self.secondary.send(record, overall_score, summary)
            )
            if sent.ok:
                report.outcome = Outcome.DELIVERED
                report.channel = "secondary"
                return report
            if sent.value is not None:
                return self._keep_locally(report, sent.value)
            report.outcome = Outcome.SAVED_LOCALLY_FLAG
            return report

        artifact: PdfArtifact = rendered.value
        report.artifact = artifact
        sent = await self._attempt(report, "primary", lambda: self.primary.send(record, summary, artifact))
        if sent.ok:
            report.outcome = Outcome.DELIVERED
            report.channel = "primary"
            return report

        sent = await self._attempt(
            report, "secondary", lambda: self.secondary.send(record, overall_score, summary, artifact)
        )
        if sent.ok:
            report.outcome = Outcome.DELIVERED
            report.channel = "secondary"
            return report
        return self._keep_locally(report, artifact)


def build_pipeline(settings: Settings, navigator: WizardNavigator | None = None) -> DeliveryPipeline:
    return DeliveryPipeline(
        renderer=SnapshotRenderer(navigator or WizardNavigator(), step_timeout=settings.snapshot_step_timeout),
        primary=EmailJSTransport(settings),
        secondary=ServerTransport(settings),
        saver=LocalSaver(settings.download_dir),
        timeout=settings.delivery_timeout,
    )


def submit_survey(record: Mapping[str, object], settings: Settings | None = None) -> DeliveryReport:
    pipeline = build_pipeline(settings or load_settings())
    return asyncio.run(pipeline.submit(record))
