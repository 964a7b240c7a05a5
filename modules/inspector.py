import zipfile

LISTING_STYLES = ("short", "long")

COMPRESSION_NAMES = {
    zipfile.ZIP_STORED: "stored",
    zipfile.ZIP_DEFLATED: "deflated",
}


def list_entries(archive_path):
    """
    Returns one dict per archive member, in physical order.
    """
    entries = []
    with zipfile.ZipFile(archive_path, 'r') as zf:
        for info in zf.infolist():
            entries.append({
                "path": info.filename,
                "size": info.file_size,
                "compressed_size": info.compress_size,
                "compression": COMPRESSION_NAMES.get(info.compress_type, str(info.compress_type)),
            })
    return entries


def format_listing(entries, style="short"):
    if style not in LISTING_STYLES:
        raise ValueError(f"Unknown listing style: {style}")

    if style == "short":
        return "\n".join(e["path"] for e in entries)

    lines = [f"{'Size':>10}  {'Packed':>10}  {'Method':<8}  Name"]
    for e in entries:
        lines.append(f"{e['size']:>10}  {e['compressed_size']:>10}  {e['compression']:<8}  {e['path']}")
    total = sum(e["size"] for e in entries)
    lines.append(f"{total:>10}  {'':>10}  {'':<8}  {len(entries)} files")
    return "\n".join(lines)
