import os
import re
import logging
import tempfile

from modules.errors import AllocationError


class ScratchRoot:
    """
    The one directory under which every workspace and temporary archive of
    this process lives. Create it once with ScratchRoot.create() and hand the
    instance to whoever needs it.
    """

    def __init__(self, path):
        self.path = path

    @classmethod
    def create(cls, location=None):
        try:
            if location:
                path = os.path.abspath(location)
                os.makedirs(path, exist_ok=True)
            else:
                path = tempfile.mkdtemp(prefix="epubdir-")
        except OSError as e:
            raise AllocationError(f"Cannot create scratch root: {e}") from e

        if not os.access(path, os.W_OK | os.X_OK):
            raise AllocationError(f"Scratch root is not writable: {path}")

        logging.info(f"Scratch root: {path}")
        return cls(path)

    def allocate(self, seed_name):
        """
        Creates a fresh workspace directory whose name starts with seed_name.
        Uniqueness comes from tempfile, so concurrent sessions never collide.
        """
        try:
            path = tempfile.mkdtemp(prefix=f"{_clean_seed(seed_name)}-", dir=self.path)
        except OSError as e:
            raise AllocationError(f"Cannot allocate workspace in {self.path}: {e}") from e

        logging.debug(f"Allocated workspace {path}")
        return path

    def temp_file(self, suffix=""):
        """Reserves an empty, uniquely named file under the scratch root."""
        try:
            fd, path = tempfile.mkstemp(suffix=suffix, dir=self.path)
        except OSError as e:
            raise AllocationError(f"Cannot create temporary file in {self.path}: {e}") from e
        os.close(fd)
        return path

    def __repr__(self):
        return f"ScratchRoot({self.path!r})"


def _clean_seed(seed_name):
    seed = os.path.basename(str(seed_name).rstrip("/\\"))
    seed = re.sub(r"[^\w.-]+", "_", seed).lstrip(".")
    return seed or "book"
