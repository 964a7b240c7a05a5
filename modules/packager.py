import os
import errno
import shutil
import logging
from abc import ABC, abstractmethod

from modules.errors import InvalidExtensionError, PackagingCancelled, PackagingFailure
from modules.filename import normalize
from modules.session import resolve
from utils.epub_wrapper import MIMETYPE, CONTAINER_PATH, find_rootfiles


class Prompter(ABC):
    """
    What the packager needs from the interactive surface. The console
    implementation lives in main.py; editors and tests plug in their own.
    """

    @abstractmethod
    def confirm_overwrite(self, path):
        """Return True to replace the existing file at path."""

    @abstractmethod
    def ask_destination(self, current):
        """Return another archive path, or None/'' to give up."""

    def notify(self, message):
        logging.warning(message)


def pack(path, context, prompter):
    """
    Re-packs the workspace containing path into its bound target file.

    The archive is built in the scratch root first and only moved over the
    destination once the archiver succeeded, so a failed run never leaves a
    half-written or clobbered destination behind.
    Returns the path of the written archive.
    """
    # 1. Which workspace, which target
    session = resolve(path)
    workspace = session.workspace

    # 2-3. Overwrite confirmation and name normalization
    destination = choose_destination(session.target, prompter)

    # 4. Build in scratch
    top_level = required_entries(workspace)
    temp_path = context.scratch.temp_file(suffix=".epub")
    logging.info(f"Packing {workspace} -> {destination}")

    try:
        result = context.archiver.compress(workspace, temp_path, top_level)
        context.log_sink.record("pack", result)

        # 5. Destination is untouched on failure
        if not result.ok:
            raise PackagingFailure(f"Could not pack {workspace}", result.returncode, context.log_sink.path)

        # 6. Publish
        publish(temp_path, destination)
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)

    logging.info(f"Successfully created: {destination}")
    return destination


def choose_destination(target, prompter):
    """
    Settles on the path to write: asks before replacing an existing file and
    asks again whenever the answer is not a usable .epub name.
    """
    destination = target
    while True:
        try:
            destination = normalize(destination)
        except InvalidExtensionError as e:
            prompter.notify(str(e))
            destination = _ask(prompter, destination)
            continue

        if os.path.isdir(destination):
            prompter.notify(f"{destination} is a directory")
            destination = _ask(prompter, destination)
            continue

        if os.path.exists(destination) and not prompter.confirm_overwrite(destination):
            destination = _ask(prompter, destination)
            continue

        return os.path.abspath(destination)


def _ask(prompter, current):
    answer = prompter.ask_destination(current)
    if not answer or not str(answer).strip():
        raise PackagingCancelled(f"Packing cancelled, {current} left as is")
    return os.path.expanduser(str(answer).strip())


def required_entries(workspace):
    """
    Top-level entries that go into the archive after mimetype: META-INF
    first, then every other entry of the workspace root. Dot entries (the
    session binding included) are left out.
    """
    for rel_path in (MIMETYPE, CONTAINER_PATH):
        if not os.path.isfile(os.path.join(workspace, *rel_path.split('/'))):
            raise PackagingFailure(f"Workspace {workspace} is missing {rel_path}")

    rootfiles = find_rootfiles(workspace)
    if not rootfiles:
        raise PackagingFailure(f"{CONTAINER_PATH} in {workspace} declares no rootfile")

    for full_path in rootfiles:
        if not os.path.isfile(os.path.join(workspace, *full_path.split('/'))):
            raise PackagingFailure(f"Workspace {workspace} is missing {full_path}")

    # The OPF may sit in a content directory or at the root next to its files
    rest = sorted(
        name for name in os.listdir(workspace)
        if not name.startswith('.') and name not in (MIMETYPE, "META-INF")
    )
    return ["META-INF"] + rest


def publish(temp_path, destination):
    """Moves the finished archive over destination in a single rename."""
    os.makedirs(os.path.dirname(destination), exist_ok=True)
    try:
        os.replace(temp_path, destination)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        # Scratch root is on another filesystem: stage next to the destination
        staged = os.path.join(os.path.dirname(destination), f".{os.path.basename(destination)}.partial")
        shutil.copyfile(temp_path, staged)
        os.replace(staged, destination)
        os.remove(temp_path)
