"""Workspace file map models."""

from typing import Any

from pydantic import BaseModel

# path -> file content
FileMap = dict[str, str]


class FileEntry(BaseModel):
    """File map entry as sent by the workbench client."""

    type: str = "file"
    content: str = ""
    isBinary: bool = False


def normalize_file_map(raw: Any) -> FileMap:
    """
    Reduce a client file map to text files only.

    Entries may be plain content strings or ``{type, content, isBinary}``
    objects. Folders, binary files and unrecognised entries are dropped.

    Args:
        raw: Mapping from workspace path to entry, or None

    Returns:
        Mapping from workspace path to text content
    """
    if not isinstance(raw, dict):
        return {}
    files: FileMap = {}
    for path, entry in raw.items():
        if isinstance(entry, str):
            files[path] = entry
        elif isinstance(entry, dict):
            parsed = FileEntry.model_validate(entry)
            if parsed.type == "file" and not parsed.isBinary:
                files[path] = parsed.content
    return files
