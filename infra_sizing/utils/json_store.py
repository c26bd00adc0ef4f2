"""
Filesystem utilities for JSON documents used by file-backed stores.
"""
import os
import re
import tempfile
from pathlib import Path
from typing import Optional


# Characters that are unsafe in file names across platforms
UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9._-]")


def document_path(directory: Path, key: str) -> Path:
    """
    Map a cache key to a file inside a directory.
    
    Args:
        directory: Store directory
        key: Cache key (any string)
    
    Returns:
        Path of the key's JSON document
    """
    safe_key = UNSAFE_FILENAME_CHARS.sub("_", key.lower())
    return directory / f"{safe_key}.json"


def read_document(path: Path) -> Optional[bytes]:
    """
    Read a document.
    
    Args:
        path: Document path
    
    Returns:
        Raw bytes, or None if the document does not exist
    
    Raises:
        OSError: If the file exists but cannot be read
    """
    if not path.exists():
        return None
    return path.read_bytes()


def write_document(path: Path, payload: bytes) -> None:
    """
    Atomically replace a document.
    
    Writes to a temporary file in the same directory and renames it over
    the target, so readers never observe a partial document.
    
    Args:
        path: Document path
        payload: Raw bytes to store
    
    Raises:
        OSError: If the write or rename fails
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    
    with tempfile.NamedTemporaryFile(
        dir=path.parent, prefix=".tmp-", suffix=".json", delete=False
    ) as temp_file:
        try:
            temp_file.write(payload)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        except OSError:
            temp_file.close()
            os.unlink(temp_file.name)
            raise
    
    try:
        os.replace(temp_file.name, path)
    finally:
        # Clean up temporary file if the rename failed
        if os.path.exists(temp_file.name):
            os.unlink(temp_file.name)


def delete_document(path: Path) -> None:
    """Remove a document if present."""
    if path.exists():
        path.unlink()
