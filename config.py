import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    # Package format
    EPUB_VERSION = int(os.getenv("EPUBDIR_EPUB_VERSION", "2"))
    GENERATOR = "epubdir 0.1.0"
    IDENTIFIER_POLICY = os.getenv("EPUBDIR_IDENTIFIER", "uuid")

    # Workspace layout
    # Note: an unset scratch root means a fresh temp directory per process.
    SCRATCH_ROOT = os.getenv("EPUBDIR_SCRATCH_ROOT") or None
    CONTENT_DIRS = [
        d.strip()
        for d in os.getenv("EPUBDIR_CONTENT_DIRS", "Text,Styles,Images,Fonts").split(",")
        if d.strip()
    ]

    # External tools
    ARCHIVER = os.getenv("EPUBDIR_ARCHIVER", "zipfile")
    TOOL_TIMEOUT = float(os.getenv("EPUBDIR_TOOL_TIMEOUT")) if os.getenv("EPUBDIR_TOOL_TIMEOUT") else None
    EPUBCHECK = os.getenv("EPUBDIR_EPUBCHECK", "epubcheck")

    # Display / logging
    LISTING_STYLE = os.getenv("EPUBDIR_LISTING_STYLE", "short")
    LOG_FILE = os.getenv("EPUBDIR_LOG_FILE", "epubdir.log")
