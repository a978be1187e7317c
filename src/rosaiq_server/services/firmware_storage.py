"""
On-disk storage for firmware artifacts.

Uploads are streamed into a staging file, cataloged, and only then moved to
their final name. Every failure path removes what was written.
"""
from __future__ import annotations

import logging
import os
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Sequence

from ..errors import DuplicateVersionError, InternalError, InvalidInputError
from ..models.firmware import Firmware
from .firmware_registry import FirmwareRegistry

LOGGER = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024
_VERSION_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._+-]{0,31}$")


@dataclass(frozen=True)
class StagedArtifact:
    path: Path
    size: int


class FirmwareStorage:
    """Filesystem side of the firmware catalog."""

    def __init__(self, directory: str | Path, max_bytes: int, allowed_extensions: Sequence[str]) -> None:
        self.directory = Path(directory)
        self.max_bytes = max_bytes
        self.allowed_extensions = tuple(ext.lower() for ext in allowed_extensions)

    def filename_for(self, version: str) -> str:
        # _VERSION_PATTERN admits only filename-safe characters.
        return f"firmware-{version}.bin"

    def path_for(self, version: str) -> Path:
        return self.directory / self.filename_for(version)

    def check_extension(self, filename: Optional[str]) -> None:
        suffix = Path(filename or "").suffix.lower()
        if suffix not in self.allowed_extensions:
            allowed = ", ".join(self.allowed_extensions)
            raise InvalidInputError(f"Firmware file must have one of these extensions: {allowed}")

    def stage(self, source: BinaryIO) -> StagedArtifact:
        """Copy ``source`` into a staging file, enforcing the size cap."""
        self.directory.mkdir(parents=True, exist_ok=True)
        staging = self.directory / f".upload-{uuid.uuid4().hex}.part"
        size = 0
        try:
            with staging.open("wb") as handle:
                while True:
                    chunk = source.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise InvalidInputError(
                            f"Firmware file exceeds the {self.max_bytes // (1024 * 1024)} MB limit"
                        )
                    handle.write(chunk)
        except InvalidInputError:
            self.discard(staging)
            raise
        except OSError as exc:
            self.discard(staging)
            raise InternalError(f"Could not store firmware upload: {exc}") from exc
        if size == 0:
            self.discard(staging)
            raise InvalidInputError("Firmware file is empty")
        return StagedArtifact(path=staging, size=size)

    def promote(self, staged: StagedArtifact, destination: Path) -> None:
        os.replace(staged.path, destination)

    def discard(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            LOGGER.warning("Could not remove firmware file %s: %s", path, exc)

    def delete_artifact(self, firmware: Firmware) -> bool:
        """Remove a cataloged binary. A missing file only warrants a warning."""
        path = Path(firmware.file_path)
        if not path.exists():
            LOGGER.warning("Firmware file for %s already missing: %s", firmware.version, path)
            return False
        self.discard(path)
        return True


def publish_firmware(
    storage: FirmwareStorage,
    registry: FirmwareRegistry,
    source: BinaryIO,
    original_filename: Optional[str],
    version: Optional[str],
    uploaded_by: Optional[str],
    notes: Optional[str] = None,
) -> Firmware:
    """
    Validate, store and catalog one uploaded image.

    Nothing is left on disk when any step fails, and the catalog row is
    removed again if the file cannot be moved into place.
    """
    version = (version or "").strip()
    if not version:
        raise InvalidInputError("Firmware version is required")
    if not _VERSION_PATTERN.match(version):
        raise InvalidInputError("Firmware version may only contain letters, digits, '.', '_', '+' and '-'")
    storage.check_extension(original_filename)
    if registry.by_version(version) is not None:
        raise DuplicateVersionError(f"Firmware version {version} already exists")
    if storage.path_for(version).exists():
        raise DuplicateVersionError(f"A firmware file for version {version} is already stored")

    staged = storage.stage(source)
    destination = storage.path_for(version)
    try:
        firmware = registry.add(
            version,
            storage.filename_for(version),
            str(destination),
            staged.size,
            uploaded_by,
            notes=(notes or "").strip() or None,
        )
    except Exception:
        storage.discard(staged.path)
        raise

    try:
        storage.promote(staged, destination)
    except OSError as exc:
        LOGGER.error("Could not move firmware %s into place: %s", version, exc)
        registry.remove(firmware.id)
        storage.discard(staged.path)
        raise InternalError(f"Could not store firmware {version}") from exc
    return firmware
