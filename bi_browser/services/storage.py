from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List


class StorageBackend(ABC):
    """
    Abstract interface for key/file storage (Local, in-memory, S3, etc.).
    """

    @abstractmethod
    def write_bytes(self, path: str, data: bytes) -> None:
        pass

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        pass

    @abstractmethod
    def list_files(self, prefix: str, suffix: str = "") -> List[str]:
        """List file paths under prefix and ending with suffix."""
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def make_dir(self, path: str) -> None:
        """Ensure a 'directory' exists (no-op on object stores)."""
        pass


class LocalFileSystemStorage(StorageBackend):
    """
    Local filesystem implementation rooted at a single directory.
    """

    def __init__(self, root: Path):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, path: str) -> Path:
        # Prevent path traversal outside the root
        full_path = (self.root / path).resolve()
        if full_path != self.root and self.root not in full_path.parents:
            raise ValueError(f"Access denied: {path}")
        return full_path

    def write_bytes(self, path: str, data: bytes) -> None:
        p = self._resolve(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)

    def read_bytes(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def list_files(self, prefix: str, suffix: str = "") -> List[str]:
        # Prefix is treated as a directory in local fs terms
        p = self._resolve(prefix)
        if not p.exists():
            return []

        return sorted(
            f.relative_to(self.root).as_posix()
            for f in p.glob(f"*{suffix}")
            if f.is_file()
        )

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def make_dir(self, path: str) -> None:
        self._resolve(path).mkdir(parents=True, exist_ok=True)


class InMemoryStorage(StorageBackend):
    """
    Dict-backed storage, for tests and for sessions that should not touch disk.
    """

    def __init__(self) -> None:
        self._files: Dict[str, bytes] = {}

    @staticmethod
    def _key(path: str) -> str:
        return path.strip("/")

    def write_bytes(self, path: str, data: bytes) -> None:
        self._files[self._key(path)] = bytes(data)

    def read_bytes(self, path: str) -> bytes:
        try:
            return self._files[self._key(path)]
        except KeyError:
            raise FileNotFoundError(path)

    def list_files(self, prefix: str, suffix: str = "") -> List[str]:
        prefix = self._key(prefix)
        start = f"{prefix}/" if prefix else ""
        return sorted(
            k for k in self._files
            if k.startswith(start) and "/" not in k[len(start):] and k.endswith(suffix)
        )

    def exists(self, path: str) -> bool:
        key = self._key(path)
        return key in self._files or any(k.startswith(f"{key}/") for k in self._files)

    def make_dir(self, path: str) -> None:
        pass
