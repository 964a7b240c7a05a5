import logging

from modules.errors import UnpackFailure


def unpack(archive_path, workspace, archiver, log_sink):
    """
    Expands archive_path into workspace with the given archiver.
    The archiver's output goes to the log sink; a non-zero exit status raises
    UnpackFailure. The archive itself is not validated here.
    """
    logging.info(f"Unpacking {archive_path} into {workspace}...")

    result = archiver.extract(archive_path, workspace)
    log_sink.record("unpack", result)

    if not result.ok:
        raise UnpackFailure(f"Could not unpack {archive_path}", result.returncode, log_sink.path)

    return workspace
