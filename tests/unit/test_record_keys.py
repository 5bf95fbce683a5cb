"""Unit tests for deterministic record key derivation."""

import hashlib

import pytest

from tapledger.core.database.keys import (
    GLOBAL_RECORD_KEY,
    RECORD_KEY_LENGTH,
    derive_record_key,
    player_record_key,
)


@pytest.mark.unit
class TestDeriveRecordKey:
    def test_is_deterministic(self):
        assert derive_record_key("player", "alice") == derive_record_key("player", "alice")

    def test_is_hex_sha256(self):
        key = derive_record_key("player", "alice")

        assert len(key) == RECORD_KEY_LENGTH == 64
        int(key, 16)

    def test_matches_length_prefixed_encoding(self):
        digest = hashlib.sha256()
        for part in (b"player", b"alice"):
            digest.update(len(part).to_bytes(8, "big"))
            digest.update(part)

        assert derive_record_key("player", "alice") == digest.hexdigest()

    def test_part_boundaries_matter(self):
        assert derive_record_key("ns", "ab", "c") != derive_record_key("ns", "a", "bc")

    def test_namespace_separates_keys(self):
        assert derive_record_key("player", "x") != derive_record_key("game_state", "x")

    @pytest.mark.parametrize("namespace", ["__meta", "__"])
    def test_reserved_namespace_rejected(self, namespace):
        with pytest.raises(ValueError, match="reserved"):
            derive_record_key(namespace, "alice")

    def test_empty_namespace_rejected(self):
        with pytest.raises(ValueError):
            derive_record_key("")

    def test_non_string_part_rejected(self):
        with pytest.raises(ValueError, match="strings"):
            derive_record_key("player", 42)  # type: ignore[arg-type]


@pytest.mark.unit
class TestWellKnownKeys:
    def test_global_key(self):
        assert GLOBAL_RECORD_KEY == derive_record_key("game_state")

    def test_player_keys_are_distinct_per_identity(self):
        assert player_record_key("alice") == derive_record_key("player", "alice")
        assert player_record_key("alice") != player_record_key("bob")
        assert player_record_key("alice") != GLOBAL_RECORD_KEY

    def test_unicode_identity(self):
        assert player_record_key("ålice") != player_record_key("alice")
