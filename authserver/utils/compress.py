"""
Compression of files and directories into ZIP or TAR archives.

Archive entry names are relative to the archive root: a compressed directory
``reports`` yields ``reports/`` followed by ``reports/<child>`` entries.
"""
from enum import Enum
from pathlib import Path
from typing import IO, Iterable, Optional, Sequence, Union
import io
import logging
import tarfile
import zipfile

from authserver.core.exceptions import ErrorCode, ForbiddenError, InternalServerError

logger = logging.getLogger(__name__)

MULTI_TARGET_BASE_NAME = "archive"

# Finder metadata that should never end up in an archive.
_MAC_METADATA_NAMES = {".DS_Store", "__MACOSX"}


class CompressFileType(Enum):
    ZIP = "zip"
    TAR = "tar"

    @property
    def extension(self) -> str:
        return self.value


_Archive = Union[zipfile.ZipFile, tarfile.TarFile]


def save_compress_file(
    target_paths: Sequence[Path],
    destination_path: Optional[Path],
    file_type: CompressFileType,
) -> Path:
    """
    Compress *target_paths* into an archive on disk and return its path.

    The archive is written to *destination_path*, or next to the first
    target when it is ``None``. An existing file of the same name is never
    overwritten; ``_1``, ``_2``, ... is appended to the base name instead.
    """
    targets = _require_targets(target_paths)
    dest_path = _initialize_dest_path(targets, destination_path, file_type)

    try:
        with dest_path.open("wb") as fileobj:
            _write_archive(targets, fileobj, file_type)
    except OSError as exc:
        logger.error("Failed to write %s archive %s", file_type.name, dest_path, exc_info=True)
        raise InternalServerError(
            ErrorCode.INTERNAL_SERVER,
            f"Error while compressing {file_type.name} file.",
        ) from exc

    logger.info("Saved %s archive %s (%s targets)", file_type.name, dest_path, len(targets))
    return dest_path


def compress_to_bytes(target_paths: Sequence[Path], file_type: CompressFileType) -> bytes:
    """Compress *target_paths* and return the archive content."""
    targets = _require_targets(target_paths)
    buffer = io.BytesIO()
    try:
        _write_archive(targets, buffer, file_type)
    except OSError as exc:
        logger.error("Failed to build %s archive in memory", file_type.name, exc_info=True)
        raise InternalServerError(
            ErrorCode.INTERNAL_SERVER,
            f"Error while compressing {file_type.name} file.",
        ) from exc
    return buffer.getvalue()


def is_mac_metadata(name: str) -> bool:
    return name in _MAC_METADATA_NAMES or name.startswith("._")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _require_targets(target_paths: Optional[Sequence[Path]]) -> list[Path]:
    if not target_paths:
        raise ForbiddenError(
            ErrorCode.FORBIDDEN,
            "No target file or directory to compress.",
        )
    targets = [Path(p) for p in target_paths]
    for target in targets:
        if not target.exists():
            raise ForbiddenError(
                ErrorCode.FORBIDDEN,
                f"Target path does not exist: {target}",
            )
    return targets


def _archive_file_name(base_name: str, file_type: CompressFileType) -> str:
    if not isinstance(file_type, CompressFileType):
        raise ForbiddenError(
            ErrorCode.FORBIDDEN_FILE_TYPE,
            f"Unsupported compression type: {file_type}",
        )
    return f"{base_name}.{file_type.extension}"


def _initialize_dest_path(
    targets: list[Path],
    destination_path: Optional[Path],
    file_type: CompressFileType,
) -> Path:
    base_name = targets[0].stem if len(targets) == 1 else MULTI_TARGET_BASE_NAME
    file_name = _archive_file_name(base_name, file_type)

    directory = Path(destination_path) if destination_path else targets[0].parent
    candidate = directory / file_name

    stem, suffix = candidate.stem, candidate.suffix
    counter = 1
    while candidate.exists():
        candidate = candidate.with_name(f"{stem}_{counter}{suffix}")
        counter += 1
    return candidate


def _write_archive(targets: Iterable[Path], fileobj: IO[bytes], file_type: CompressFileType) -> None:
    if file_type is CompressFileType.ZIP:
        with zipfile.ZipFile(fileobj, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            _add_targets(targets, archive)
    elif file_type is CompressFileType.TAR:
        with tarfile.open(fileobj=fileobj, mode="w", format=tarfile.PAX_FORMAT) as archive:
            _add_targets(targets, archive)
    else:
        raise ForbiddenError(
            ErrorCode.FORBIDDEN_FILE_TYPE,
            f"Unsupported compression type: {file_type}",
        )


def _add_targets(targets: Iterable[Path], archive: _Archive) -> None:
    for target in targets:
        if is_mac_metadata(target.name):
            continue
        if target.is_dir():
            _add_folder(target, "", archive)
        elif target.is_file():
            _add_file(target, "", archive)


def _add_folder(folder: Path, parent_entry_name: str, archive: _Archive) -> None:
    entry_name = f"{parent_entry_name}{folder.name}/"
    _put_directory_entry(folder, entry_name, archive)

    for child in sorted(folder.iterdir()):
        if is_mac_metadata(child.name):
            continue
        if child.is_dir():
            _add_folder(child, entry_name, archive)
        elif child.is_file():
            _add_file(child, entry_name, archive)


def _add_file(path: Path, parent_entry_name: str, archive: _Archive) -> None:
    entry_name = f"{parent_entry_name}{path.name}"
    logger.trace("Adding archive entry %s", entry_name)
    if isinstance(archive, zipfile.ZipFile):
        archive.write(path, arcname=entry_name)
    else:
        archive.add(str(path), arcname=entry_name, recursive=False)


def _put_directory_entry(folder: Path, entry_name: str, archive: _Archive) -> None:
    if isinstance(archive, zipfile.ZipFile):
        archive.writestr(zipfile.ZipInfo(entry_name), b"")
    else:
        archive.add(str(folder), arcname=entry_name.rstrip("/"), recursive=False)
