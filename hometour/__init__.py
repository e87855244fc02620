from .delivery import DeliveryPipeline, build_pipeline, submit_survey
from .navigation import WizardNavigator
from .report import render_report_pdf
from .results import DeliveryReport, Outcome, PdfArtifact, StepResult
from .scoring import build_summary, compute_overall_score, compute_section_scores, normalize
from .survey import new_record, report_filename

__version__ = "0.1.0"

__all__ = [
    "DeliveryPipeline",
    "DeliveryReport",
    "Outcome",
    "PdfArtifact",
    "StepResult",
    "WizardNavigator",
    "build_pipeline",
    "build_summary",
    "compute_overall_score",
    "compute_section_scores",
    "new_record",
    "normalize",
    "render_report_pdf",
    "report_filename",
    "submit_survey",
]
