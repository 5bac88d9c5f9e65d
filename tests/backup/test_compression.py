"""Tests for backup compression."""

import logging
import tarfile
import zipfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from mcwrapper.backup.compression import compress_backup
from mcwrapper.config import CompressionMode


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    """Create an uncompressed backup directory."""
    backup = tmp_path / "20261018120000"
    (backup / "world" / "region").mkdir(parents=True)
    (backup / "world" / "level.dat").write_bytes(b"level-data")
    (backup / "world" / "region" / "r.0.0.mca").write_bytes(b"region")
    (backup / "server.properties").write_text("level-name=world\n", encoding="utf-8")
    return backup


class TestCompressBackup:
    """Test cases for compress_backup."""

    def test_none_leaves_directory(self, backup_dir: Path) -> None:
        """Test that no compression returns the directory untouched."""
        result = compress_backup(backup_dir, CompressionMode.NONE, Mock(spec=logging.Logger))
        assert result == backup_dir
        assert (backup_dir / "world" / "level.dat").exists()

    def test_tar_gzip(self, backup_dir: Path) -> None:
        """Test that the tarball is rooted at the backup name."""
        archive = compress_backup(backup_dir, CompressionMode.TAR_GZIP, Mock(spec=logging.Logger))

        assert archive == backup_dir.with_name("20261018120000.tgz")
        assert not backup_dir.exists()
        with tarfile.open(archive, "r:gz") as tar:
            names = set(tar.getnames())
        assert "20261018120000/world/level.dat" in names
        assert "20261018120000/server.properties" in names

    def test_zip(self, backup_dir: Path) -> None:
        """Test that the zip archive is rooted at the backup name."""
        archive = compress_backup(backup_dir, CompressionMode.ZIP, Mock(spec=logging.Logger))

        assert archive.name == "20261018120000.zip"
        assert not backup_dir.exists()
        with zipfile.ZipFile(archive) as zf:
            assert zf.read("20261018120000/world/region/r.0.0.mca") == b"region"
