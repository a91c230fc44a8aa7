"""Note discovery and file access."""

from .catalog import Note, NoteCatalog, create_note, scan_notes, validate_note_name

__all__ = [
    "Note",
    "NoteCatalog",
    "create_note",
    "scan_notes",
    "validate_note_name",
]
