import os

from modules.errors import InvalidExtensionError

EPUB_EXTENSION = ".epub"


def normalize(path, coerce=False):
    """
    Makes sure path names an .epub file.

    - no extension: '.epub' is appended
    - '.epub' in any letter case: returned unchanged
    - anything else: InvalidExtensionError, unless coerce is set, in which
      case the extension is replaced by '.epub'

    normalize(normalize(p)) == normalize(p) holds in both modes.
    """
    path = os.fspath(path)
    root, ext = os.path.splitext(path)

    if not ext:
        return path + EPUB_EXTENSION
    if ext.lower() == EPUB_EXTENSION:
        return path
    if coerce:
        return root + EPUB_EXTENSION
    raise InvalidExtensionError(path, ext)
