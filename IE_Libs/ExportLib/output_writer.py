"""
Output collaborators for ImageEdit: byte sink and archive builder.

Classes:
    OutputConfig: Configuration for writing encoded bytes to disk
    OutputWriter: Validates output paths and writes bytes

Functions:
    build_archive: Pack (filename, bytes) entries into one ZIP archive
"""

import io
import logging
import zipfile
from dataclasses import asdict, dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

ArchiveEntry = Tuple[str, bytes]


@dataclass
class OutputConfig:
    """Configuration for writing output files.

    Attributes:
        create_directories: Create parent directories if missing (default: True)
        overwrite: Overwrite existing files (default: False)
        base_directory: Optional absolute directory outputs must stay inside
    """
    create_directories: bool = True
    overwrite: bool = False
    base_directory: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


class OutputWriter:
    """Writes encoded bytes to disk with path validation."""

    def __init__(self, config: Optional[OutputConfig] = None):
        self.config = config or OutputConfig()
        self._base_dir = None
        if self.config.base_directory:
            base_path = Path(self.config.base_directory)
            if not base_path.is_absolute():
                raise ValueError(
                    f"base_directory must be an absolute path: {self.config.base_directory}"
                )
            self._base_dir = base_path.resolve()

    def resolve_path(self, path_str: str) -> Path:
        """
        Validate an output path against traversal and the base directory.

        Raises:
            ValueError: If the path contains '..' or resolves outside base_directory
        """
        path = Path(path_str)
        if ".." in path.parts:
            raise ValueError(f"Path traversal detected: output path contains '..': {path_str}")

        if path.is_absolute() or self._base_dir is None:
            resolved = path.resolve()
        else:
            resolved = (self._base_dir / path).resolve()

        if self._base_dir is not None:
            try:
                resolved.relative_to(self._base_dir)
            except ValueError:
                raise ValueError(
                    f"Security: output path '{path_str}' resolves to '{resolved}' "
                    f"which is outside the allowed base directory '{self._base_dir}'"
                )
        return resolved

    def write(self, data: bytes, path_str: str) -> Path:
        """
        Write bytes to a validated path.

        Returns:
            Path that was written

        Raises:
            ValueError: If the file exists and overwrite=False, or the path is invalid
            OSError: If the file cannot be written
        """
        output_file = self.resolve_path(path_str)

        if self.config.create_directories:
            output_file.parent.mkdir(parents=True, exist_ok=True)

        if output_file.exists() and not self.config.overwrite:
            raise ValueError(
                f"Output file already exists: {output_file}. "
                f"Set overwrite=True to replace."
            )

        try:
            output_file.write_bytes(data)
        except OSError as e:
            raise OSError(f"Failed to write {output_file}: {e}") from e

        logger.info(f"Wrote {len(data)} bytes to {output_file}")
        return output_file


def _safe_member_name(name: str) -> str:
    member = PurePosixPath(str(name).replace("\\", "/"))
    if member.is_absolute() or ".." in member.parts or not member.name:
        raise ValueError(f"Invalid archive member name: {name!r}")
    return str(member)


def build_archive(entries: Iterable[ArchiveEntry]) -> bytes:
    """
    Pack (filename, bytes) entries into a ZIP archive.

    Duplicate names get a numeric suffix so no entry is lost.

    Args:
        entries: Iterable of (member_name, data) pairs

    Returns:
        ZIP archive bytes
    """
    buffer = io.BytesIO()
    used = set()
    count = 0
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries:
            member = _safe_member_name(name)
            if member in used:
                stem = PurePosixPath(member)
                index = 1
                while str(stem.with_name(f"{stem.stem}_{index}{stem.suffix}")) in used:
                    index += 1
                member = str(stem.with_name(f"{stem.stem}_{index}{stem.suffix}"))
            used.add(member)
            archive.writestr(member, data)
            count += 1
    logger.debug(f"Built archive with {count} entries")
    return buffer.getvalue()
