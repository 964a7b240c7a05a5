import os
import logging
from dataclasses import dataclass, field
from typing import Callable, Tuple

from modules.scaffolder import DEFAULT_CONTENT_DIRS, get_identifier_policy, uuid_identifier
from modules.workspace import ScratchRoot
from utils.archiver import ZipfileArchiver, get_archiver
from utils.log_sink import LogSink

SUPPORTED_VERSIONS = (2, 3)
TOOL_LOG_NAME = "tools.log"


@dataclass
class Context:
    """
    Process-wide state shared by every editing session: the scratch root, the
    tool log sink, the archiver and the scaffold settings. Build it once at
    startup and pass it to the lifecycle operations.
    """
    scratch: ScratchRoot
    log_sink: LogSink
    archiver: object = field(default_factory=ZipfileArchiver)
    epub_version: int = 2
    content_dirs: Tuple[str, ...] = DEFAULT_CONTENT_DIRS
    identifier: Callable[[], str] = uuid_identifier
    generator: str = "epubdir"

    def __post_init__(self):
        check_version(self.epub_version)
        self.content_dirs = tuple(self.content_dirs)

    @classmethod
    def from_config(cls, config):
        check_version(config.EPUB_VERSION)
        scratch = ScratchRoot.create(config.SCRATCH_ROOT)
        log_sink = LogSink(os.path.join(scratch.path, TOOL_LOG_NAME))
        log_sink.note(f"Session started, scratch root {scratch.path}")
        logging.info(f"Tool output goes to {log_sink.path}")

        return cls(
            scratch=scratch,
            log_sink=log_sink,
            archiver=get_archiver(config.ARCHIVER, timeout=config.TOOL_TIMEOUT),
            epub_version=config.EPUB_VERSION,
            content_dirs=config.CONTENT_DIRS,
            identifier=get_identifier_policy(config.IDENTIFIER_POLICY),
            generator=config.GENERATOR,
        )

    def close(self):
        self.log_sink.close()


def check_version(version):
    if version not in SUPPORTED_VERSIONS:
        raise ValueError(f"Unsupported EPUB version: {version} (expected 2 or 3)")
