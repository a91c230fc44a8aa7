from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from ..errors import DirectoryScanError, NoteCreateError, describe_os_error
from .io import create_exclusive

DEFAULT_NOTE_EXTENSION = ".md"

_RESERVED_CHARS_RE = re.compile(r'[<>:"/\\|?*]')
_WINDOWS_RESERVED = (
    {"con", "prn", "aux", "nul"}
    | {f"com{i}" for i in range(1, 10)}
    | {f"lpt{i}" for i in range(1, 10)}
)
MAX_NAME_LENGTH = 120


@dataclass(frozen=True)
class Note:
    path: Path
    title: str

    @classmethod
    def from_path(cls, path: Path) -> "Note":
        path = Path(path)
        return cls(path=path, title=path.stem)

    @property
    def file_name(self) -> str:
        return self.path.name


def _has_extension(name: str, extension: str) -> bool:
    return name.lower().endswith(extension.lower())


def scan_notes(directory: Path, extension: str = DEFAULT_NOTE_EXTENSION) -> tuple[Note, ...]:
    """Return the notes in ``directory`` ordered by file name.

    Only regular, non-hidden files with ``extension`` are included.
    """
    directory = Path(directory)
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise DirectoryScanError(
            f"Cannot read notes directory {directory}: {describe_os_error(exc)}",
            path=directory,
        ) from exc

    notes: dict[Path, Note] = {}
    for entry in entries:
        if entry.name.startswith("."):
            continue
        if not _has_extension(entry.name, extension):
            continue
        try:
            if not entry.is_file():
                continue
        except OSError:
            continue
        notes[entry] = Note.from_path(entry)
    return tuple(sorted(notes.values(), key=lambda note: (note.file_name, note.path)))


def validate_note_name(name: str, extension: str = DEFAULT_NOTE_EXTENSION) -> str:
    """Return the file name for ``name`` or raise NoteCreateError."""
    cleaned = unicodedata.normalize("NFKC", name or "").strip()
    if not cleaned:
        raise NoteCreateError("Note name is empty.")
    if any(unicodedata.category(ch)[0] == "C" for ch in cleaned):
        raise NoteCreateError("Note name contains control characters.")
    if _RESERVED_CHARS_RE.search(cleaned):
        raise NoteCreateError(
            'Note name cannot contain any of < > : " / \\ | ? *'
        )
    if not _has_extension(cleaned, extension):
        cleaned = f"{cleaned}{extension}"
    stem = cleaned[: -len(extension)] if extension else cleaned
    if stem.strip(" .") == "":
        raise NoteCreateError(f"Invalid note name: {name!r}.")
    if cleaned.endswith((" ", ".")) or stem.endswith((" ", ".")):
        raise NoteCreateError("Note name cannot end with a space or a dot.")
    if stem.split(".")[0].strip().lower() in _WINDOWS_RESERVED:
        raise NoteCreateError(f"{stem!r} is a reserved file name.")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise NoteCreateError(f"Note name is longer than {MAX_NAME_LENGTH} characters.")
    return cleaned


def create_note(
    directory: Path,
    name: str,
    *,
    extension: str = DEFAULT_NOTE_EXTENSION,
    template: str = "",
) -> Note:
    """Create an empty (or templated) note file and return it.

    Duplicate display titles are rejected case-insensitively, so "Todo" and
    "todo" cannot coexist in one catalog.
    """
    directory = Path(directory)
    file_name = validate_note_name(name, extension)
    candidate = Note.from_path(directory / file_name)
    try:
        existing = scan_notes(directory, extension)
    except DirectoryScanError as exc:
        raise NoteCreateError(str(exc), path=candidate.path) from exc
    key = candidate.title.casefold()
    for note in existing:
        if note.title.casefold() == key:
            raise NoteCreateError(
                f"A note named {note.file_name!r} already exists.", path=note.path
            )

    text = template.replace("{title}", candidate.title) if template else ""
    try:
        create_exclusive(candidate.path, text)
    except FileExistsError as exc:
        raise NoteCreateError(
            f"{file_name!r} already exists.", path=candidate.path
        ) from exc
    except OSError as exc:
        raise NoteCreateError(
            f"Could not create {file_name}: {describe_os_error(exc)}",
            path=candidate.path,
        ) from exc
    return candidate


class NoteCatalog:
    """Ordered snapshot of the notes directory, replaced only by rescanning."""

    def __init__(
        self,
        directory: Path,
        *,
        extension: str = DEFAULT_NOTE_EXTENSION,
        notes: tuple[Note, ...] = (),
    ) -> None:
        self.directory = Path(directory)
        self.extension = extension
        self._notes: tuple[Note, ...] = tuple(notes)

    @property
    def notes(self) -> tuple[Note, ...]:
        return self._notes

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self._notes)

    def __getitem__(self, index: int) -> Note:
        return self._notes[index]

    def refresh(self) -> tuple[Note, ...]:
        """Rescan the directory. On failure the previous snapshot is kept."""
        self._notes = scan_notes(self.directory, self.extension)
        return self._notes

    def index_of(self, path: Path) -> Optional[int]:
        target = Path(path)
        for idx, note in enumerate(self._notes):
            if note.path == target:
                return idx
        return None

    def create(self, name: str, *, template: str = "") -> Note:
        return create_note(
            self.directory, name, extension=self.extension, template=template
        )
