import os
import uuid
import shutil
import logging

from modules.templates import render, CONTAINER_TEMPLATE, PACKAGE_TEMPLATE, NCX_TEMPLATE
from utils.epub_wrapper import MIMETYPE, MIMETYPE_CONTENT

CONTENT_DIR = "OEBPS"
MANIFEST_PATH = f"{CONTENT_DIR}/content.opf"
NCX_PATH = f"{CONTENT_DIR}/toc.ncx"
DEFAULT_CONTENT_DIRS = ("Text", "Styles", "Images", "Fonts")

PLACEHOLDER_ID = "urn:uuid:00000000-0000-0000-0000-000000000000"


def uuid_identifier():
    return f"urn:uuid:{uuid.uuid4()}"


def placeholder_identifier():
    # Same value for every book; only useful for reproducible output.
    return PLACEHOLDER_ID


IDENTIFIER_POLICIES = {
    "uuid": uuid_identifier,
    "placeholder": placeholder_identifier,
}


def get_identifier_policy(name):
    try:
        return IDENTIFIER_POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown identifier policy: {name}") from None


def scaffold(workspace, version=2, identifier=None, content_dirs=DEFAULT_CONTENT_DIRS, generator="epubdir"):
    """
    Builds an empty but structurally valid ePub tree inside workspace:

        mimetype
        META-INF/container.xml
        OEBPS/{Text,Styles,Images,Fonts}/
        OEBPS/content.opf
        OEBPS/toc.ncx

    If any step fails the whole workspace directory is removed and the
    original exception propagates.
    """
    if identifier is None:
        identifier = uuid_identifier()

    logging.info(f"Scaffolding ePub {version} tree in {workspace}...")

    try:
        # 1. Marker file, no trailing newline
        _write(workspace, MIMETYPE, MIMETYPE_CONTENT)

        # 2. Container descriptor
        _write(workspace, "META-INF/container.xml", render(CONTAINER_TEMPLATE, [MANIFEST_PATH]))

        # 3. Content directory and its subdirectories
        for name in content_dirs:
            os.makedirs(os.path.join(workspace, CONTENT_DIR, name), exist_ok=True)

        # 4. Manifest and navigation document
        opf = render(PACKAGE_TEMPLATE, [f"{version}.0", identifier, generator])
        _write(workspace, MANIFEST_PATH, opf)
        _write(workspace, NCX_PATH, render(NCX_TEMPLATE, [identifier]))
    except BaseException:
        logging.error(f"Scaffolding failed, removing {workspace}")
        shutil.rmtree(workspace, ignore_errors=True)
        raise

    return workspace


def _write(workspace, rel_path, content):
    path = os.path.join(workspace, *rel_path.split('/'))
    os.makedirs(os.path.dirname(path), exist_ok=True)
    # newline='' keeps the marker file byte-exact on every platform
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(content)
    logging.debug(f"Wrote {rel_path}")
    return path
