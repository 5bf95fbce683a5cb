"""
Unit tests for InputValidator.

Identities must be exact, non-empty strings; scores must be positive whole
numbers that fit an unsigned 64-bit integer.
"""

import pytest

from tapledger.core.database.types import U64_MAX
from tapledger.core.validation.input_validator import ZERO_SCORE_MESSAGE, InputValidator
from tapledger.modules.shared.exceptions import InvalidScoreError, ValidationError


@pytest.mark.unit
class TestValidateIdentity:
    def test_accepts_plain_identity(self):
        assert InputValidator.validate_identity("alice") == "alice"

    def test_accepts_wallet_like_identity(self):
        wallet = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
        assert InputValidator.validate_identity(wallet) == wallet

    @pytest.mark.parametrize("value", ["", "   ", "\t"])
    def test_rejects_blank(self, value):
        with pytest.raises(ValidationError) as exc_info:
            InputValidator.validate_identity(value)

        assert exc_info.value.field == "caller"

    @pytest.mark.parametrize("value", [" alice", "alice ", "alice\n"])
    def test_rejects_surrounding_whitespace(self, value):
        with pytest.raises(ValidationError, match="whitespace"):
            InputValidator.validate_identity(value)

    @pytest.mark.parametrize("value", [None, 42, b"alice", ["alice"]])
    def test_rejects_non_strings(self, value):
        with pytest.raises(ValidationError):
            InputValidator.validate_identity(value, field_name="player")

    def test_rejects_overlong(self):
        with pytest.raises(ValidationError, match="cannot exceed 8"):
            InputValidator.validate_identity("a" * 9, max_length=8)

    def test_field_name_in_error_code(self):
        with pytest.raises(ValidationError) as exc_info:
            InputValidator.validate_identity("", field_name="player")

        assert exc_info.value.error_code == "VALIDATION_PLAYER"


@pytest.mark.unit
class TestValidateScore:
    @pytest.mark.parametrize("value, expected", [(1, 1), (150, 150), ("42", 42), (" 7 ", 7)])
    def test_accepts_positive_whole_numbers(self, value, expected):
        assert InputValidator.validate_score(value) == expected

    @pytest.mark.parametrize("value", [2**63 - 1, 2**63, U64_MAX, str(U64_MAX)])
    def test_accepts_full_unsigned_64_bit_range(self, value):
        assert InputValidator.validate_score(value) == int(value)

    @pytest.mark.parametrize("value", [0, "0"])
    def test_zero_is_rejected_with_exact_message(self, value):
        with pytest.raises(InvalidScoreError) as exc_info:
            InputValidator.validate_score(value)

        assert exc_info.value.message == ZERO_SCORE_MESSAGE == "Score must be greater than 0."

    @pytest.mark.parametrize("value", [-1, "-5"])
    def test_negative_is_rejected(self, value):
        with pytest.raises(InvalidScoreError, match="negative"):
            InputValidator.validate_score(value)

    def test_above_maximum_is_rejected(self):
        with pytest.raises(InvalidScoreError, match="exceed"):
            InputValidator.validate_score(U64_MAX + 1)

    @pytest.mark.parametrize("value", [True, False, 1.0, 2.5, None, "abc", "1e3", "--5", "٣"])
    def test_rejects_non_integers(self, value):
        with pytest.raises(InvalidScoreError):
            InputValidator.validate_score(value)
