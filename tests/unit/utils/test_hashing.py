"""Tests for script checksums."""

from sqlgoose.utils.hashing import checksum, checksum_file


class TestChecksum:
    """Tests for checksum()."""

    def test_deterministic(self):
        data = b"-- +goose Up\nCREATE TABLE t (id INT);\n"
        assert checksum(data) == checksum(data)

    def test_fixed_width_hex(self):
        digest = checksum(b"anything")
        assert len(digest) == 32
        assert all(c in "0123456789abcdef" for c in digest)

    def test_single_byte_change(self):
        assert checksum(b"DROP TABLE t;") != checksum(b"DROP TABLE u;")

    def test_known_value(self):
        assert checksum(b"") == "d41d8cd98f00b204e9800998ecf8427e"

    def test_file_matches_bytes(self, tmp_path):
        path = tmp_path / "001_init.sql"
        path.write_bytes(b"-- +goose Up\r\nSELECT 1;\r\n")
        assert checksum_file(path) == checksum(b"-- +goose Up\r\nSELECT 1;\r\n")
