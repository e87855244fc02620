from __future__ import annotations

import base64
import enum
from dataclasses import dataclass, field
from typing import Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StepResult(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T | None = None) -> "StepResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str, value: T | None = None) -> "StepResult[T]":
        return cls(ok=False, value=value, error=error)


@dataclass(frozen=True)
class PdfArtifact:
    pdf_base64: str
    filename: str

    @classmethod
    def from_bytes(cls, data: bytes, filename: str) -> "PdfArtifact":
        return cls(pdf_base64=base64.b64encode(data).decode("ascii"), filename=filename)

    @property
    def pdf_bytes(self) -> bytes:
        return base64.b64decode(self.pdf_base64)

    @property
    def data_uri(self) -> str:
        return f"data:application/pdf;base64,{self.pdf_base64}"


class Outcome(enum.Enum):
    DELIVERED = "delivered"
    LOCAL_DOWNLOAD = "local_download"
    SAVED_LOCALLY_FLAG = "saved_locally"


@dataclass
class DeliveryReport:
    outcome: Outcome
    channel: Optional[str] = None
    saved_path: Optional[str] = None
    artifact: Optional[PdfArtifact] = None
    attempts: List[Tuple[str, bool, Optional[str]]] = field(default_factory=list)

    @property
    def saved_locally(self) -> bool:
        return self.outcome is not Outcome.DELIVERED
