"""Pack a finished backup directory into a single archive."""

import logging
import shutil
import tarfile
import zipfile
from pathlib import Path

from mcwrapper.config import CompressionMode


def compress_backup(
    source: Path,
    mode: CompressionMode,
    logger: logging.Logger,
) -> Path:
    """Archive ``source`` next to itself and delete the directory.

    Archive members are stored under the backup name, so unpacking the
    archive inside the backup root recreates the original directory.

    Args:
        source: Uncompressed backup directory
        mode: Compression mode resolved from the configuration
        logger: Logger instance for logging operations

    Returns:
        Path of the archive, or ``source`` itself for ``CompressionMode.NONE``

    """
    if mode is CompressionMode.NONE:
        return source

    archive = source.with_name(f"{source.name}{mode.suffix}")
    logger.info(f"Compressing {source.name} into {archive.name}")

    if mode is CompressionMode.TAR_GZIP:
        with tarfile.open(archive, "w:gz") as tar:
            tar.add(source, arcname=source.name)
    else:
        with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in sorted(source.rglob("*")):
                zf.write(path, arcname=str(path.relative_to(source.parent)))

    shutil.rmtree(source)
    return archive
