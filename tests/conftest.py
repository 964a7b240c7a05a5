import os
import zipfile

import pytest

from modules.context import Context
from modules.packager import Prompter
from modules.workspace import ScratchRoot
from utils.archiver import ToolResult
from utils.log_sink import LogSink


class ScriptedPrompter(Prompter):
    """Answers prompts from prepared lists and remembers what was asked."""

    def __init__(self, confirm=(), destinations=()):
        self.confirm = list(confirm)
        self.destinations = list(destinations)
        self.confirmed = []
        self.asked = []
        self.messages = []

    def confirm_overwrite(self, path):
        self.confirmed.append(path)
        return self.confirm.pop(0) if self.confirm else False

    def ask_destination(self, current):
        self.asked.append(current)
        return self.destinations.pop(0) if self.destinations else None

    def notify(self, message):
        self.messages.append(message)


class FailingArchiver:
    """Archiver whose every run exits with status 2."""

    name = "failing"

    def __init__(self):
        self.calls = []

    def extract(self, archive_path, dest_dir):
        self.calls.append(("extract", archive_path))
        return ToolResult(["fake-unzip", archive_path], 2, "fake-unzip: cannot find central directory")

    def compress(self, source_dir, output_path, top_level):
        self.calls.append(("compress", source_dir))
        with open(output_path, "wb") as f:
            f.write(b"PK half written")
        return ToolResult(["fake-zip", output_path], 2, "fake-zip: write error")


@pytest.fixture
def context(tmp_path):
    scratch = ScratchRoot.create(str(tmp_path / "scratch"))
    sink = LogSink(os.path.join(scratch.path, "tools.log"))
    ctx = Context(scratch=scratch, log_sink=sink)
    yield ctx
    ctx.close()


@pytest.fixture
def prompter_factory():
    return ScriptedPrompter


@pytest.fixture
def failing_archiver():
    return FailingArchiver()


@pytest.fixture
def sample_epub(tmp_path):
    """A small, well-formed ePub written without the code under test."""
    path = tmp_path / "sample.epub"
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
        zf.writestr(
            "META-INF/container.xml",
            '<?xml version="1.0"?>'
            '<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">'
            '<rootfiles><rootfile full-path="OEBPS/content.opf" '
            'media-type="application/oebps-package+xml"/></rootfiles></container>',
        )
        zf.writestr("OEBPS/content.opf", '<?xml version="1.0"?><package version="2.0"/>')
        zf.writestr("OEBPS/toc.ncx", '<?xml version="1.0"?><ncx/>')
        zf.writestr("OEBPS/Text/chapter1.xhtml", "<html><body><p>Hello</p></body></html>")
    return str(path)


@pytest.fixture
def flat_epub(tmp_path):
    """An ePub whose package document sits at the archive root."""
    path = tmp_path / "flat.epub"
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
        zf.writestr(
            "META-INF/container.xml",
            '<?xml version="1.0"?>'
            '<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">'
            '<rootfiles><rootfile full-path="content.opf" '
            'media-type="application/oebps-package+xml"/></rootfiles></container>',
        )
        zf.writestr("content.opf", '<?xml version="1.0"?><package version="2.0"/>')
        zf.writestr("toc.ncx", '<?xml version="1.0"?><ncx/>')
        zf.writestr("chapter1.xhtml", "<html><body><p>Flat</p></body></html>")
        zf.writestr("Images/cover.jpg", b"\xff\xd8\xff\xe0 not really a jpeg")
    return str(path)
