from pathlib import Path

from hometour.download import LocalSaver
from hometour.results import PdfArtifact

ARTIFACT = PdfArtifact.from_bytes(b"%PDF-1.4 local", "Home-Tour-Notes_Kade 3_.pdf")


def test_saves_into_download_dir(tmp_path):
    location = LocalSaver(tmp_path / "Downloads").save(ARTIFACT)
    assert Path(location) == tmp_path / "Downloads" / ARTIFACT.filename
    assert Path(location).read_bytes() == b"%PDF-1.4 local"


def test_falls_back_to_temp_dir(tmp_path, monkeypatch):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")
    monkeypatch.setattr("hometour.download.tempfile.gettempdir", lambda: str(tmp_path / "tmp"))

    location = LocalSaver(blocker).save(ARTIFACT)

    assert Path(location) == tmp_path / "tmp" / "hometour" / ARTIFACT.filename
    assert Path(location).exists()


def test_falls_back_to_browser(tmp_path, monkeypatch):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")
    monkeypatch.setattr("hometour.download.tempfile.gettempdir", lambda: str(blocker))
    opened = []

    def open_browser(uri):
        opened.append(uri)
        return True

    location = LocalSaver(blocker, open_browser=open_browser).save(ARTIFACT)

    assert location == ARTIFACT.data_uri
    assert opened == [ARTIFACT.data_uri]


def test_returns_none_when_every_strategy_fails(tmp_path, monkeypatch):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")
    monkeypatch.setattr("hometour.download.tempfile.gettempdir", lambda: str(blocker))

    assert LocalSaver(blocker, open_browser=lambda uri: False).save(ARTIFACT) is None
