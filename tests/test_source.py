import io
import urllib.error
from pathlib import Path

import pytest

from chartdata import source
from chartdata.source import AcquisitionError, decode_upload, read_csv_source


class _FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class TestLocalFiles:
    def test_reads_text(self, csv_file: Path, sample_csv: str):
        assert read_csv_source(csv_file).strip() == sample_csv

    def test_accepts_string_path(self, csv_file: Path):
        assert read_csv_source(str(csv_file)).startswith("Datetime,")

    def test_strips_bom(self, tmp_path: Path):
        path = tmp_path / "bom.csv"
        path.write_bytes("\ufeffDatetime,Open\n".encode("utf-8"))
        assert read_csv_source(path).startswith("Datetime")

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(AcquisitionError, match="not found"):
            read_csv_source(tmp_path / "missing.csv")


class TestUrls:
    def test_fetches_once(self, monkeypatch):
        calls = []

        def fake_urlopen(url, timeout):
            calls.append((url, timeout))
            return _FakeResponse(b"Datetime,Open\n")

        monkeypatch.setattr(source.urllib.request, "urlopen", fake_urlopen)
        text = read_csv_source("https://example.com/data.csv", timeout=3)

        assert text == "Datetime,Open\n"
        assert calls == [("https://example.com/data.csv", 3)]

    def test_http_error_status(self, monkeypatch):
        def fake_urlopen(url, timeout):
            raise urllib.error.HTTPError(url, 404, "Not Found", {}, None)

        monkeypatch.setattr(source.urllib.request, "urlopen", fake_urlopen)
        with pytest.raises(AcquisitionError, match="HTTP error! status: 404"):
            read_csv_source("http://example.com/data.csv")

    def test_network_error(self, monkeypatch):
        def fake_urlopen(url, timeout):
            raise urllib.error.URLError("connection refused")

        monkeypatch.setattr(source.urllib.request, "urlopen", fake_urlopen)
        with pytest.raises(AcquisitionError, match="connection refused"):
            read_csv_source("http://example.com/data.csv")


class TestDecodeUpload:
    def test_utf8(self):
        assert decode_upload(b"a,b\n") == "a,b\n"

    def test_invalid_bytes(self):
        with pytest.raises(AcquisitionError):
            decode_upload(b"\xff\xfe\xfa")
