import zipfile
import os
import logging
from bs4 import BeautifulSoup

MIMETYPE = "mimetype"
MIMETYPE_CONTENT = "application/epub+zip"
CONTAINER_PATH = "META-INF/container.xml"


def extract_epub(epub_path, extract_to):
    """
    Extracts an ePub file to a directory.
    Returns the list of member names that were written.
    """
    with zipfile.ZipFile(epub_path, 'r') as zip_ref:
        zip_ref.extractall(extract_to)
        return zip_ref.namelist()


def find_rootfiles(source_dir):
    """
    Reads META-INF/container.xml and returns the full-path of every rootfile
    (normally just the OPF), relative to source_dir.
    """
    container_path = os.path.join(source_dir, *CONTAINER_PATH.split('/'))
    with open(container_path, 'r', encoding='utf-8') as f:
        soup = BeautifulSoup(f.read(), 'xml')

    return [rf['full-path'] for rf in soup.find_all('rootfile') if rf.get('full-path')]


def iter_members(source_dir, top_level):
    """
    Yields (file_path, archive_name) for every file below the given top-level
    entries, in a stable order. Anything whose name starts with a dot is left
    out, directories included.
    """
    for entry in top_level:
        if entry.startswith('.') or entry == MIMETYPE:
            continue
        entry_path = os.path.join(source_dir, entry)

        if os.path.isfile(entry_path):
            yield entry_path, entry
            continue

        for root, dirs, files in os.walk(entry_path):
            dirs[:] = sorted(d for d in dirs if not d.startswith('.'))
            for file in sorted(files):
                if file.startswith('.'):
                    continue
                file_path = os.path.join(root, file)
                archive_name = os.path.relpath(file_path, source_dir).replace(os.sep, '/')
                yield file_path, archive_name


def package_epub(source_dir, output_path, top_level):
    """
    Zips the given top-level entries of a directory into an ePub file.
    Critically, mimetype must be the first file and uncompressed.
    """
    mimetype_path = os.path.join(source_dir, MIMETYPE)

    with zipfile.ZipFile(output_path, 'w', zipfile.ZIP_DEFLATED) as zip_out:
        # Add mimetype first (STORED / No Compression)
        zip_out.write(mimetype_path, MIMETYPE, compress_type=zipfile.ZIP_STORED)

        count = 1
        for file_path, archive_name in iter_members(source_dir, top_level):
            zip_out.write(file_path, archive_name)
            count += 1

    logging.debug(f"Packaged {count} entries into {output_path}")
    return count
