"""
Unit tests for the pure leaderboard transitions.

Records are plain transient ORM objects here; no session is involved.
"""

from datetime import datetime, timedelta, timezone

import pytest

from tapledger.core.database.keys import GLOBAL_RECORD_KEY, player_record_key
from tapledger.modules.leaderboard import scoring_logic

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def global_record():
    return scoring_logic.new_global_record("admin")


@pytest.fixture
def alice():
    return scoring_logic.new_player_record("alice", T0)


@pytest.fixture
def bob():
    return scoring_logic.new_player_record("bob", T0)


@pytest.mark.unit
class TestNewRecords:
    def test_global_record_starts_empty(self, global_record):
        assert global_record.record_key == GLOBAL_RECORD_KEY
        assert global_record.administrator_identity == "admin"
        assert global_record.total_players == 0
        assert global_record.total_games == 0
        assert global_record.top_score == 0
        assert global_record.top_player is None

    def test_player_record_starts_empty(self, alice):
        assert alice.record_key == player_record_key("alice")
        assert alice.owner_identity == "alice"
        assert alice.high_score == 0
        assert alice.total_games == 0
        assert alice.last_played_at == int(T0.timestamp())

    def test_register_counts_players(self, global_record):
        assert scoring_logic.register(global_record) == 1
        assert scoring_logic.register(global_record) == 2
        assert global_record.total_players == 2


@pytest.mark.unit
class TestApplyScore:
    def test_first_score(self, alice, global_record):
        outcome = scoring_logic.apply_score(alice, global_record, 100, T0 + timedelta(seconds=5))

        assert alice.high_score == 100
        assert alice.total_games == 1
        assert alice.last_played_at == int(T0.timestamp()) + 5
        assert global_record.total_games == 1
        assert global_record.top_score == 100
        assert global_record.top_player == "alice"
        assert outcome.is_personal_best
        assert outcome.is_new_top_score
        assert outcome.previous_top_player is None

    def test_lower_score_still_counts_as_game(self, alice, global_record):
        scoring_logic.apply_score(alice, global_record, 100, T0)

        outcome = scoring_logic.apply_score(alice, global_record, 40, T0 + timedelta(minutes=1))

        assert alice.high_score == 100
        assert alice.total_games == 2
        assert global_record.total_games == 2
        assert not outcome.is_personal_best
        assert not outcome.is_new_top_score
        assert outcome.played_at == T0 + timedelta(minutes=1)

    def test_equal_score_keeps_first_holder(self, alice, bob, global_record):
        scoring_logic.apply_score(alice, global_record, 100, T0)

        outcome = scoring_logic.apply_score(bob, global_record, 100, T0)

        assert global_record.top_player == "alice"
        assert global_record.top_score == 100
        assert bob.high_score == 100
        assert outcome.is_personal_best
        assert not outcome.is_new_top_score

    def test_equal_personal_score_is_not_a_personal_best(self, alice, global_record):
        scoring_logic.apply_score(alice, global_record, 100, T0)

        outcome = scoring_logic.apply_score(alice, global_record, 100, T0)

        assert not outcome.is_personal_best
        assert outcome.previous_high_score == outcome.high_score == 100

    def test_higher_score_takes_top_spot(self, alice, bob, global_record):
        scoring_logic.apply_score(alice, global_record, 100, T0)

        outcome = scoring_logic.apply_score(bob, global_record, 150, T0)

        assert global_record.top_player == "bob"
        assert global_record.top_score == 150
        assert outcome.previous_top_player == "alice"
        assert outcome.previous_top_score == 100

    def test_outcome_to_dict(self, alice, global_record):
        data = scoring_logic.apply_score(alice, global_record, 7, T0).to_dict()

        assert data["identity"] == "alice"
        assert data["score"] == 7
        assert data["played_at"] == T0.isoformat()
        assert data["is_personal_best"] is True
        assert data["is_new_top_score"] is True


@pytest.mark.unit
class TestRules:
    @pytest.mark.parametrize(
        "score, best, expected",
        [(101, 100, True), (100, 100, False), (99, 100, False), (1, 0, True)],
    )
    def test_is_improvement_is_strict(self, score, best, expected):
        assert scoring_logic.is_improvement(score, best) is expected

    def test_invariant_holds_through_scenario(self, alice, bob, global_record):
        for record, score in ((alice, 100), (bob, 100), (bob, 150), (alice, 3)):
            scoring_logic.apply_score(record, global_record, score, T0)

            assert global_record.top_player is not None
            assert global_record.top_score > 0
            assert global_record.total_games > 0
            assert global_record.top_score == max(alice.high_score, bob.high_score)
