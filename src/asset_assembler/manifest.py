"""Content-addressed file manifest.

Every file of a build is stored with its SHA-1 digest, the digest the hosting
API uses to decide which files it already has.
"""

import hashlib
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Union


@dataclass(frozen=True)
class FileEntry:
    """One file of the build.

    Attributes:
        path: Relative path without leading slash, e.g. "index.html"
        content: File bytes
    """
    path: str
    content: bytes

    @property
    def sha1(self) -> str:
        return hashlib.sha1(self.content).hexdigest()

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def deploy_path(self) -> str:
        """Path as the hosting API expects it (leading slash)."""
        return "/" + self.path.lstrip("/")


class FileManifest:
    """Mapping of path -> FileEntry, iterated in sorted path order.

    Example:
        >>> manifest = FileManifest()
        >>> manifest.add("index.html", "<!DOCTYPE html>")
        >>> manifest.digests()
        {'/index.html': '...'}
    """

    def __init__(self, entries: Iterable[FileEntry] = ()):
        self._entries: Dict[str, FileEntry] = {}
        for entry in entries:
            self._entries[entry.path] = entry

    def add(self, path: str, content: Union[str, bytes]) -> FileEntry:
        """Add or replace a file; text is encoded as UTF-8."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        entry = FileEntry(path=path.lstrip("/"), content=content)
        self._entries[entry.path] = entry
        return entry

    def get(self, path: str) -> FileEntry:
        return self._entries.get(path.lstrip("/"))

    def text(self, path: str) -> str:
        """Decoded content of a file, or empty string when absent."""
        entry = self.get(path)
        return entry.content.decode("utf-8") if entry else ""

    def digests(self) -> Dict[str, str]:
        """Deploy path -> SHA-1 digest, the body of a manifest deploy."""
        return {entry.deploy_path: entry.sha1 for entry in self}

    def entries_for_digests(self, required: Iterable[str]) -> List[FileEntry]:
        """Entries to upload for the digests the host reports as required.

        One entry per digest: files with identical bytes are uploaded once.
        """
        wanted = set(required)
        selected: List[FileEntry] = []
        for entry in self:
            if entry.sha1 in wanted:
                selected.append(entry)
                wanted.discard(entry.sha1)
        return selected

    def copy(self) -> "FileManifest":
        return FileManifest(self._entries.values())

    @property
    def paths(self) -> List[str]:
        return sorted(self._entries)

    @property
    def total_bytes(self) -> int:
        return sum(entry.size for entry in self._entries.values())

    def __contains__(self, path: str) -> bool:
        return path.lstrip("/") in self._entries

    def __iter__(self) -> Iterator[FileEntry]:
        return (self._entries[path] for path in self.paths)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FileManifest):
            return NotImplemented
        return self._entries == other._entries
