"""Tests for streaming file hashing."""

import hashlib
import io
import os
from pathlib import Path

import pytest

from lansend.core.hashing import HASH_BLOCK_SIZE, compute_file_hash, hash_stream


class TestComputeFileHash:
    """Tests for compute_file_hash."""

    @pytest.mark.parametrize(
        "size",
        [0, 1, HASH_BLOCK_SIZE - 1, HASH_BLOCK_SIZE, HASH_BLOCK_SIZE + 1, 3 * HASH_BLOCK_SIZE + 7],
    )
    def test_matches_buffered_hash(self, tmp_path: Path, size: int) -> None:
        """Streaming hash should equal hashing the whole content at once."""
        data = os.urandom(size)
        path = tmp_path / "data.bin"
        path.write_bytes(data)

        assert compute_file_hash(path) == hashlib.sha256(data).hexdigest()

    def test_empty_file(self, tmp_path: Path) -> None:
        """Empty file should hash to the SHA-256 of no bytes."""
        path = tmp_path / "empty"
        path.write_bytes(b"")

        assert compute_file_hash(path) == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_small_block_size(self, tmp_path: Path) -> None:
        """Result should not depend on the block size."""
        data = b"The quick brown fox jumps over the lazy dog"
        path = tmp_path / "fox.txt"
        path.write_bytes(data)

        assert compute_file_hash(path, block_size=3) == hashlib.sha256(data).hexdigest()

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """Should raise for missing files."""
        with pytest.raises(FileNotFoundError):
            compute_file_hash(tmp_path / "missing")


class TestHashStream:
    """Tests for hash_stream."""

    def test_reads_from_current_position(self) -> None:
        """Only bytes after the current position should be digested."""
        stream = io.BytesIO(b"headerpayload")
        stream.seek(len(b"header"))

        assert hash_stream(stream, block_size=4) == hashlib.sha256(b"payload").hexdigest()

    def test_rejects_non_positive_block_size(self) -> None:
        """A zero block size would never reach EOF."""
        with pytest.raises(ValueError, match="block_size"):
            hash_stream(io.BytesIO(b"data"), block_size=0)
