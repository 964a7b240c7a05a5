"""
Decompression / compression facilities.

Both archivers report their outcome the way an external program does: an exit
status plus whatever it printed. Callers decide what a non-zero status means.

ZipfileArchiver runs in-process with the zipfile module. InfoZipArchiver shells
out to the Info-ZIP `zip` and `unzip` programs.
"""

import os
import logging
import zipfile
import subprocess
from dataclasses import dataclass, field
from typing import List, Optional

from utils.epub_wrapper import MIMETYPE, extract_epub, package_epub


@dataclass
class ToolResult:
    command: List[str]
    returncode: int
    output: str = ""

    @property
    def ok(self):
        return self.returncode == 0


class ZipfileArchiver:
    name = "zipfile"

    def extract(self, archive_path, dest_dir):
        command = ["zipfile", "extract", archive_path, dest_dir]
        try:
            names = extract_epub(archive_path, dest_dir)
        except (zipfile.BadZipFile, OSError, RuntimeError) as e:
            return ToolResult(command, 1, f"{type(e).__name__}: {e}")
        return ToolResult(command, 0, f"extracted {len(names)} entries")

    def compress(self, source_dir, output_path, top_level):
        command = ["zipfile", "compress", output_path, MIMETYPE, *top_level]
        try:
            count = package_epub(source_dir, output_path, top_level)
        except (zipfile.BadZipFile, OSError, ValueError) as e:
            return ToolResult(command, 1, f"{type(e).__name__}: {e}")
        return ToolResult(command, 0, f"wrote {count} entries")


@dataclass
class InfoZipArchiver:
    zip_command: str = "zip"
    unzip_command: str = "unzip"
    timeout: Optional[float] = None
    name: str = field(default="infozip", init=False)

    def extract(self, archive_path, dest_dir):
        return self._run([self.unzip_command, "-o", archive_path, "-d", dest_dir])

    def compress(self, source_dir, output_path, top_level):
        # zip appends to an existing archive, and the reserved temp file is empty
        if os.path.exists(output_path) and os.path.getsize(output_path) == 0:
            os.remove(output_path)

        output_path = os.path.abspath(output_path)
        first = self._run([self.zip_command, "-X0", output_path, MIMETYPE], cwd=source_dir)
        if not first.ok:
            return first

        entries = [e for e in top_level if e != MIMETYPE and not e.startswith(".")]
        rest = self._run(
            [self.zip_command, "-Xr9D", output_path, *entries, "-x", ".*", "*/.*"],
            cwd=source_dir,
        )
        rest.output = "\n".join(part for part in (first.output, rest.output) if part)
        return rest

    def _run(self, command, cwd=None):
        logging.debug(f"Running: {' '.join(command)}")
        try:
            proc = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            return ToolResult(command, 127, f"command not found: {e}")
        except subprocess.TimeoutExpired:
            return ToolResult(command, 124, f"timed out after {self.timeout}s")

        output = "\n".join(part for part in (proc.stdout.strip(), proc.stderr.strip()) if part)
        return ToolResult(command, proc.returncode, output)


def get_archiver(name, timeout=None):
    if name == "zipfile":
        return ZipfileArchiver()
    if name == "infozip":
        return InfoZipArchiver(timeout=timeout)
    raise ValueError(f"Unknown archiver: {name} (expected 'zipfile' or 'infozip')")
