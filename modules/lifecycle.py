"""
Entry points used by the command line and by editor integrations:

    create(target, context)              -> Session over a fresh scaffold
    open_archive(archive, context)       -> Session over an unpacked archive
    repack(path, context, prompter)      -> path of the written archive

The returned Session's workspace is what the directory view is opened on.
"""

import os
import shutil
import logging

from modules.filename import normalize
from modules.packager import pack
from modules.scaffolder import scaffold
from modules.session import bind
from modules.unpacker import unpack


def create(target_path, context):
    # A foreign extension is replaced rather than rejected for new books
    target = normalize(target_path, coerce=True)
    if target != os.fspath(target_path):
        logging.info(f"Target renamed to {target}")

    workspace = context.scratch.allocate(_seed(target))
    scaffold(
        workspace,
        version=context.epub_version,
        identifier=context.identifier(),
        content_dirs=context.content_dirs,
        generator=context.generator,
    )
    return _bind_or_discard(workspace, target)


def open_archive(archive_path, context):
    # Rejected before anything touches the filesystem
    archive = normalize(archive_path)

    workspace = context.scratch.allocate(_seed(archive))
    try:
        unpack(archive, workspace, context.archiver, context.log_sink)
    except Exception:
        shutil.rmtree(workspace, ignore_errors=True)
        raise
    return _bind_or_discard(workspace, archive)


def repack(path, context, prompter):
    return pack(path, context, prompter)


def _seed(target):
    return os.path.splitext(os.path.basename(target))[0]


def _bind_or_discard(workspace, target):
    try:
        return bind(workspace, target)
    except Exception:
        shutil.rmtree(workspace, ignore_errors=True)
        raise
