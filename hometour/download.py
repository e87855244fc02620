from __future__ import annotations

import logging
import tempfile
import webbrowser
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .results import PdfArtifact
from .survey import DEFAULT_FILENAME, sanitize_filename

logger = logging.getLogger(__name__)

Strategy = Callable[[PdfArtifact], str]


def _write(directory: Path, artifact: PdfArtifact) -> str:
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / sanitize_filename(artifact.filename or DEFAULT_FILENAME)
    target.write_bytes(artifact.pdf_bytes)
    return str(target)


class LocalSaver:
    """Keeps a copy of the PDF on this machine; tries each strategy until one works."""

    def __init__(self, download_dir: Path, open_browser: Callable[[str], bool] = webbrowser.open) -> None:
        self.download_dir = Path(download_dir)
        self.open_browser = open_browser

    def strategies(self) -> List[Tuple[str, Strategy]]:
        return [
            ("download_dir", self.save_to_download_dir),
            ("temp_dir", self.save_to_temp_dir),
            ("browser", self.open_in_browser),
        ]

    def save_to_download_dir(self, artifact: PdfArtifact) -> str:
        return _write(self.download_dir, artifact)

    def save_to_temp_dir(self, artifact: PdfArtifact) -> str:
        return _write(Path(tempfile.gettempdir()) / "hometour", artifact)

    def open_in_browser(self, artifact: PdfArtifact) -> str:
        uri = artifact.data_uri
        if not self.open_browser(uri):
            raise RuntimeError("no browser available")
        return uri

    def save(self, artifact: PdfArtifact) -> Optional[str]:
        for name, strategy in self.strategies():
            try:
                location = strategy(artifact)
            except Exception as exc:
                logger.warning("Local save via %s failed: %r", name, exc)
                continue
            logger.info("Saved %s locally via %s", artifact.filename, name)
            return location
        return None
