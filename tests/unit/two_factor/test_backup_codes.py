"""
Unit tests for backup codes.
"""

import pytest

from two_factor.domain.backup_codes import (
    BACKUP_CODE_ALPHABET,
    BACKUP_CODE_LENGTH,
    generate_backup_codes,
    hash_backup_code,
    is_backup_code_shaped,
    normalize_backup_code,
)


class TestGenerateBackupCodes:
    """Tests for backup code generation."""

    def test_default_count(self):
        assert len(generate_backup_codes()) == 10

    def test_codes_are_distinct(self):
        codes = generate_backup_codes(50)
        assert len(set(codes)) == 50

    def test_codes_use_unambiguous_alphabet(self):
        for code in generate_backup_codes(20):
            assert len(code) == BACKUP_CODE_LENGTH
            assert set(code) <= set(BACKUP_CODE_ALPHABET)

    def test_alphabet_excludes_confusable_characters(self):
        assert not set("01OIL") & set(BACKUP_CODE_ALPHABET)


class TestNormalizeAndHash:
    """Tests for code normalization and hashing."""

    @pytest.mark.parametrize("typed", ["abcd-efgh", "ABCD EFGH", " abcdefgh\t"])
    def test_normalize(self, typed):
        assert normalize_backup_code(typed) == "ABCDEFGH"

    def test_hash_ignores_formatting(self):
        assert hash_backup_code("abcd-efgh") == hash_backup_code("ABCDEFGH")

    def test_hash_is_not_the_code(self):
        digest = hash_backup_code("ABCDEFGH")
        assert "ABCDEFGH" not in digest
        assert len(digest) == 64

    @pytest.mark.parametrize(
        "code,shaped",
        [
            ("ABCD-EFGH", True),
            ("abcdefgh", True),
            ("ABCD0FGH", False),
            ("ABCDEFG", False),
            ("123456", False),
            ("", False),
        ],
    )
    def test_is_backup_code_shaped(self, code, shaped):
        assert is_backup_code_shaped(code) is shaped
