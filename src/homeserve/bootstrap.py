"""
Site bootstrap: make sure the document root and its error pages exist.

Runs once before the server starts:

    website/                   created (with __errors__/) if missing
    website/__errors__/404.html  written with a minimal page if missing
    website/__errors__/500.html  written with a minimal page if missing

Existing files are never overwritten.
"""

import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

ERROR_DIR_NAME = "__errors__"

DEFAULT_ERROR_PAGES = {
    "404.html": "<!DOCTYPE html><html><body><h1>404</h1></body></html>",
    "500.html": "<!DOCTYPE html><html><body><h1>500</h1></body></html>",
}


def ensure_site_tree(document_root: Union[str, Path]) -> Path:
    """
    Create the document root and default error pages where missing.

    Args:
        document_root: Site directory (e.g. "website").

    Returns:
        The error-page directory.

    Raises:
        OSError: If a directory or page cannot be created.
    """
    root = Path(document_root)
    error_dir = root / ERROR_DIR_NAME

    if not root.is_dir():
        logger.info(f"Creating document root {root}")
    error_dir.mkdir(parents=True, exist_ok=True)

    for file_name, page in DEFAULT_ERROR_PAGES.items():
        page_path = error_dir / file_name
        if not page_path.exists():
            logger.info(f"Writing default error page {page_path}")
            page_path.write_text(page, encoding="utf-8")

    return error_dir
