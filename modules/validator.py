import shlex
import logging
import subprocess

from utils.archiver import ToolResult


def run_epubcheck(archive_path, command, log_sink, timeout=None):
    """
    Runs the configured validator (epubcheck by default) on a packed archive.
    Its report is appended to the tool log; the exit status is returned.
    """
    args = shlex.split(command) + [archive_path]
    logging.info(f"Validating {archive_path}...")

    try:
        proc = subprocess.run(args, capture_output=True, text=True, check=False, timeout=timeout)
        output = "\n".join(part for part in (proc.stdout.strip(), proc.stderr.strip()) if part)
        result = ToolResult(args, proc.returncode, output)
    except FileNotFoundError as e:
        result = ToolResult(args, 127, f"command not found: {e}")
    except subprocess.TimeoutExpired:
        result = ToolResult(args, 124, f"timed out after {timeout}s")

    log_sink.record("check", result)
    if result.ok:
        logging.info(f"{archive_path} passed validation")
    else:
        logging.warning(f"{archive_path} failed validation, see {log_sink.path}")
    return result.returncode
