"""
Artifact Storage.

Every successful conversion produces exactly one file:

    {base_dir}/
        0b6f3d0e-6c1f-4a52-9c53-2f3f3a9d5e11.mp3
        9a1c...e7.mp3

File names are random UUID4s, so concurrent requests (even with
identical text) never share or overwrite a file. Writes go to a
``.tmp`` sibling first and are renamed into place, so a reader never
sees a half-written artifact.

Retention:
    Artifacts are NOT deleted automatically. Two opt-in mechanisms exist:
        - storage.delete_after_send: the API removes the file once the
          response has been sent
        - ArtifactStore.cleanup(max_age_seconds), exposed as
          ``tts-convert --cleanup SECONDS``

Usage:
    store = ArtifactStore("./temp")
    artifact = store.save(mp3_bytes)
    artifact.file_path   # /abs/path/temp/<uuid>.mp3
"""
from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from tts_convert.core.logging import get_logger, info, verbose, warn

_LOG = get_logger("tts-convert.storage")

ARTIFACT_SUFFIX = ".mp3"


@dataclass(frozen=True)
class AudioArtifact:
    """
    One generated audio file.

    Attributes:
        file_path: Absolute path of the file on local storage.
        file_name: ``<uuid>.mp3``; also the download name.
        size: Number of bytes written.
    """
    file_path: str
    file_name: str
    size: int


class ArtifactStore:
    """
    Writes audio artifacts into a single directory.

    Thread-safe: the only shared state is the directory itself, and
    every write targets a fresh UUID name.
    """

    def __init__(self, base_dir: str):
        self._base_dir = Path(base_dir).expanduser().resolve()
        self._stats_lock = threading.Lock()
        self._total_cleaned = 0
        self._total_bytes_freed = 0

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @staticmethod
    def new_file_name() -> str:
        """A globally unique artifact name (128-bit UUID4 + ``.mp3``)."""
        return f"{uuid.uuid4()}{ARTIFACT_SUFFIX}"

    def save(self, audio: bytes) -> AudioArtifact:
        """
        Write ``audio`` to a new uniquely named file.

        Returns:
            The written AudioArtifact.

        Raises:
            OSError: If the directory cannot be created or the write fails.
        """
        self._base_dir.mkdir(parents=True, exist_ok=True)
        file_name = self.new_file_name()
        path = self._base_dir / file_name
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_bytes(audio)
            tmp.replace(path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise

        verbose(_LOG, "artifact_saved", file=file_name, bytes=len(audio))
        return AudioArtifact(file_path=str(path), file_name=file_name, size=len(audio))

    def exists(self, file_path: str) -> bool:
        return Path(file_path).is_file()

    def discard(self, file_path: str) -> bool:
        """
        Delete one artifact. Missing files are not an error.

        Returns:
            True if a file was removed.
        """
        path = Path(file_path)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            warn(_LOG, "artifact_discard_failed", file=path.name, error=str(e))
            return False
        verbose(_LOG, "artifact_discarded", file=path.name)
        return True

    def cleanup(self, max_age_seconds: float) -> Dict[str, int]:
        """
        Remove artifacts whose modification time is older than ``max_age_seconds``.

        Returns:
            Dict with 'files_removed', 'bytes_freed' and 'errors'.
        """
        if not self._base_dir.exists():
            return {"files_removed": 0, "bytes_freed": 0, "errors": 0}

        cutoff = time.time() - max_age_seconds
        files_removed = 0
        bytes_freed = 0
        errors = 0

        for artifact in self._base_dir.glob(f"*{ARTIFACT_SUFFIX}"):
            try:
                st = artifact.stat()
                if st.st_mtime < cutoff:
                    artifact.unlink()
                    files_removed += 1
                    bytes_freed += st.st_size
            except OSError as e:
                errors += 1
                verbose(_LOG, "cleanup_file_error", file=artifact.name, error=str(e))

        with self._stats_lock:
            self._total_cleaned += files_removed
            self._total_bytes_freed += bytes_freed

        info(
            _LOG, "artifact_cleanup",
            files_removed=files_removed,
            bytes_freed=bytes_freed,
            errors=errors,
        )
        return {"files_removed": files_removed, "bytes_freed": bytes_freed, "errors": errors}

    def stats(self) -> Dict[str, int]:
        """
        Current usage of the artifact directory.

        Returns:
            Dict with file_count, total_bytes, total_cleaned, total_bytes_freed.
        """
        file_count = 0
        total_bytes = 0
        if self._base_dir.exists():
            for artifact in self._base_dir.glob(f"*{ARTIFACT_SUFFIX}"):
                try:
                    total_bytes += artifact.stat().st_size
                    file_count += 1
                except OSError:
                    # Removed between glob and stat
                    continue

        with self._stats_lock:
            return {
                "file_count": file_count,
                "total_bytes": total_bytes,
                "total_cleaned": self._total_cleaned,
                "total_bytes_freed": self._total_bytes_freed,
            }
