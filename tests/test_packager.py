import errno
import os
import zipfile

import pytest

from modules.errors import PackagingCancelled, PackagingFailure, SessionNotFoundError
from modules.packager import Prompter, choose_destination, pack, publish, required_entries
from modules.scaffolder import scaffold
from modules.session import bind


@pytest.fixture
def session(context, tmp_path):
    ws = context.scratch.allocate("book")
    scaffold(ws)
    return bind(ws, str(tmp_path / "out" / "book.epub"))


def scratch_files(context):
    return sorted(
        name for name in os.listdir(context.scratch.path)
        if os.path.isfile(os.path.join(context.scratch.path, name))
    )


class TestPack:

    def test_writes_target(self, session, context, prompter_factory):
        prompter = prompter_factory()
        final_path = pack(session.workspace, context, prompter)

        assert final_path == session.target
        assert prompter.confirmed == []
        with zipfile.ZipFile(final_path) as zf:
            first = zf.infolist()[0]
            assert first.filename == "mimetype"
            assert first.compress_type == zipfile.ZIP_STORED
            assert zf.read("mimetype") == b"application/epub+zip"
            assert {"META-INF/container.xml", "OEBPS/content.opf", "OEBPS/toc.ncx"} <= set(zf.namelist())

    def test_from_file_inside_tree(self, session, context, prompter_factory):
        nested = os.path.join(session.workspace, "OEBPS", "Text", "ch1.xhtml")
        with open(nested, "w") as f:
            f.write("<html/>")

        final_path = pack(nested, context, prompter_factory())
        with zipfile.ZipFile(final_path) as zf:
            assert "OEBPS/Text/ch1.xhtml" in zf.namelist()

    def test_dotfiles_left_out(self, session, context, prompter_factory):
        with open(os.path.join(session.workspace, "OEBPS", ".DS_Store"), "w") as f:
            f.write("junk")
        os.makedirs(os.path.join(session.workspace, "OEBPS", "Text", ".cache"))
        with open(os.path.join(session.workspace, "OEBPS", "Text", ".cache", "x"), "w") as f:
            f.write("junk")

        with zipfile.ZipFile(pack(session.workspace, context, prompter_factory())) as zf:
            names = zf.namelist()
        assert not any(part.startswith(".") for name in names for part in name.split("/"))

    def test_no_temp_files_left(self, session, context, prompter_factory):
        pack(session.workspace, context, prompter_factory())
        assert scratch_files(context) == ["tools.log"]

    def test_unbound_path(self, tmp_path, context, prompter_factory):
        with pytest.raises(SessionNotFoundError):
            pack(str(tmp_path), context, prompter_factory())


class TestOverwrite:

    def test_confirmed(self, session, context, prompter_factory):
        os.makedirs(os.path.dirname(session.target))
        with open(session.target, "wb") as f:
            f.write(b"old")

        prompter = prompter_factory(confirm=[True])
        assert pack(session.workspace, context, prompter) == session.target
        assert prompter.confirmed == [session.target]
        assert zipfile.is_zipfile(session.target)

    def test_declined_asks_for_new_path(self, session, context, prompter_factory, tmp_path):
        os.makedirs(os.path.dirname(session.target))
        with open(session.target, "wb") as f:
            f.write(b"old")
        other = str(tmp_path / "copy.epub")

        prompter = prompter_factory(confirm=[False], destinations=[other])
        assert pack(session.workspace, context, prompter) == other
        assert prompter.asked == [session.target]
        with open(session.target, "rb") as f:
            assert f.read() == b"old"
        assert zipfile.is_zipfile(other)

    def test_declined_without_answer(self, session, context, prompter_factory):
        os.makedirs(os.path.dirname(session.target))
        with open(session.target, "wb") as f:
            f.write(b"old")

        with pytest.raises(PackagingCancelled):
            pack(session.workspace, context, prompter_factory(confirm=[False], destinations=[""]))
        with open(session.target, "rb") as f:
            assert f.read() == b"old"


class TestChooseDestination:

    def test_bad_extension_asks_again(self, tmp_path, prompter_factory):
        prompter = prompter_factory(destinations=[str(tmp_path / "fixed.epub")])
        assert choose_destination(str(tmp_path / "book.zip"), prompter) == str(tmp_path / "fixed.epub")
        assert len(prompter.messages) == 1
        assert "book.zip" in prompter.messages[0]

    def test_extension_appended(self, tmp_path, prompter_factory):
        prompter = prompter_factory(destinations=[str(tmp_path / "other")])
        assert choose_destination(str(tmp_path / "a.txt"), prompter) == str(tmp_path / "other.epub")

    def test_each_answer_checked_for_overwrite(self, tmp_path, prompter_factory):
        first = tmp_path / "first.epub"
        second = tmp_path / "second.epub"
        first.write_bytes(b"1")
        second.write_bytes(b"2")
        third = str(tmp_path / "third.epub")

        prompter = prompter_factory(confirm=[False, False], destinations=[str(second), third])
        assert choose_destination(str(first), prompter) == third
        assert prompter.confirmed == [str(first), str(second)]

    def test_directory_rejected(self, tmp_path, prompter_factory):
        (tmp_path / "dir.epub").mkdir()
        prompter = prompter_factory(destinations=[str(tmp_path / "file.epub")])
        assert choose_destination(str(tmp_path / "dir.epub"), prompter) == str(tmp_path / "file.epub")
        assert prompter.confirmed == []


class TestPackFailure:

    def test_destination_untouched(self, session, context, prompter_factory, failing_archiver):
        os.makedirs(os.path.dirname(session.target))
        with open(session.target, "wb") as f:
            f.write(b"previous archive")
        context.archiver = failing_archiver

        with pytest.raises(PackagingFailure) as excinfo:
            pack(session.workspace, context, prompter_factory(confirm=[True]))

        assert excinfo.value.returncode == 2
        assert excinfo.value.log_path == context.log_sink.path
        with open(session.target, "rb") as f:
            assert f.read() == b"previous archive"
        assert "fake-zip: write error" in context.log_sink.read()
        assert scratch_files(context) == ["tools.log"]

    def test_no_destination_created(self, session, context, prompter_factory, failing_archiver):
        context.archiver = failing_archiver
        with pytest.raises(PackagingFailure):
            pack(session.workspace, context, prompter_factory())
        assert not os.path.exists(session.target)


class TestRequiredEntries:

    def test_scaffold(self, session):
        assert required_entries(session.workspace) == ["META-INF", "OEBPS"]

    def test_missing_mimetype(self, session):
        os.remove(os.path.join(session.workspace, "mimetype"))
        with pytest.raises(PackagingFailure, match="mimetype"):
            required_entries(session.workspace)

    def test_missing_manifest(self, session):
        os.remove(os.path.join(session.workspace, "OEBPS", "content.opf"))
        with pytest.raises(PackagingFailure, match="content.opf"):
            required_entries(session.workspace)

    def test_other_content_directory(self, tmp_path):
        ws = tmp_path / "ws"
        (ws / "META-INF").mkdir(parents=True)
        (ws / "EPUB").mkdir()
        (ws / "mimetype").write_text("application/epub+zip")
        (ws / "EPUB" / "package.opf").write_text("<package/>")
        (ws / "META-INF" / "container.xml").write_text(
            '<container><rootfiles><rootfile full-path="EPUB/package.opf"/></rootfiles></container>'
        )
        assert required_entries(str(ws)) == ["META-INF", "EPUB"]

    def test_package_document_at_root(self, tmp_path):
        ws = tmp_path / "ws"
        (ws / "META-INF").mkdir(parents=True)
        (ws / "Images").mkdir()
        (ws / "mimetype").write_text("application/epub+zip")
        (ws / "content.opf").write_text("<package/>")
        (ws / "toc.ncx").write_text("<ncx/>")
        (ws / ".epubdir-session.json").write_text("{}")
        (ws / "META-INF" / "container.xml").write_text(
            '<container><rootfiles><rootfile full-path="content.opf"/></rootfiles></container>'
        )
        assert required_entries(str(ws)) == ["META-INF", "Images", "content.opf", "toc.ncx"]

    def test_missing_rootfile(self, session):
        with open(os.path.join(session.workspace, "META-INF", "container.xml"), "w") as f:
            f.write('<container><rootfiles><rootfile full-path="book.opf"/></rootfiles></container>')
        with pytest.raises(PackagingFailure, match="book.opf"):
            required_entries(session.workspace)


class TestPublish:

    def test_replaces_atomically(self, tmp_path):
        temp = tmp_path / "temp.epub"
        dest = tmp_path / "sub" / "dest.epub"
        temp.write_bytes(b"new")
        publish(str(temp), str(dest))
        assert dest.read_bytes() == b"new"
        assert not temp.exists()

    def test_cross_device(self, tmp_path, monkeypatch):
        temp = tmp_path / "temp.epub"
        dest = tmp_path / "dest.epub"
        temp.write_bytes(b"new")
        dest.write_bytes(b"old")
        real_replace = os.replace

        def replace(src, dst):
            if src == str(temp):
                raise OSError(errno.EXDEV, "Invalid cross-device link")
            return real_replace(src, dst)

        monkeypatch.setattr(os, "replace", replace)
        publish(str(temp), str(dest))

        assert dest.read_bytes() == b"new"
        assert not temp.exists()
        assert sorted(p.name for p in tmp_path.iterdir()) == ["dest.epub"]


class TestPrompter:

    def test_interface_is_abstract(self):
        with pytest.raises(TypeError):
            Prompter()

    def test_partial_implementation_rejected(self):
        class ConfirmOnly(Prompter):
            def confirm_overwrite(self, path):
                return True

        with pytest.raises(TypeError):
            ConfirmOnly()
