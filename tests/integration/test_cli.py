"""End-to-end tests for the tapledger command line."""

import json

import pytest
from sqlalchemy.exc import OperationalError

from tapledger.cli import (
    EXIT_OK,
    EXIT_REJECTED,
    EXIT_STARTUP_FAILED,
    EXIT_STORE_FAILED,
    build_parser,
    main,
)
from tapledger.modules.leaderboard.service import LeaderboardService

pytestmark = [pytest.mark.integration, pytest.mark.database]


@pytest.fixture
def run(database_url, capsys):
    """Invoke the CLI against a per-test database and decode its JSON output."""

    def _run(*argv):
        code = main(["--database-url", database_url, *argv])
        captured = capsys.readouterr()
        if code == EXIT_OK:
            return code, json.loads(captured.out)
        assert captured.out == ""
        return code, json.loads(captured.err.strip().splitlines()[-1])

    return _run


class TestCommands:
    def test_full_game(self, run):
        code, payload = run("initialize", "--caller", "admin")
        assert code == EXIT_OK
        assert payload["initialized"] is True
        assert payload["administrator"] == "admin"

        assert run("register", "--caller", "alice")[1]["registered"] is True
        run("register", "--caller", "bob")

        code, payload = run("submit", "--caller", "alice", "100")
        assert code == EXIT_OK
        assert payload["is_new_top_score"] is True

        run("submit", "--caller", "bob", "100")
        run("submit", "--caller", "bob", "150")

        code, board = run("leaderboard")
        assert board == {
            "total_players": 2,
            "total_games": 3,
            "top_score": 150,
            "top_player": "bob",
        }

        code, alice = run("player", "alice")
        assert alice["high_score"] == 100
        assert alice["total_games"] == 1

    def test_rejections_exit_with_error_json(self, run):
        code, payload = run("leaderboard")
        assert code == EXIT_REJECTED
        assert payload["error"]["error_code"] == "LEADERBOARD_NOT_INITIALIZED"

        run("initialize", "--caller", "admin")
        run("register", "--caller", "alice")

        code, payload = run("submit", "--caller", "alice", "0")
        assert code == EXIT_REJECTED
        assert payload["error"]["message"] == "Score must be greater than 0."

        code, payload = run("submit", "--caller", "mallory", "5", "--player", "alice")
        assert code == EXIT_REJECTED
        assert payload["error"]["category"] == "authorization"

        code, payload = run("initialize", "--caller", "admin")
        assert code == EXIT_REJECTED
        assert payload["error"]["error_code"] == "ALREADY_INITIALIZED"

    def test_startup_failure(self, capsys):
        code = main(["--database-url", "nosuchdialect://", "leaderboard"])

        assert code == EXIT_STARTUP_FAILED
        payload = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert payload["error"]["error_type"] == "DatabaseInitializationError"

    def test_database_error_during_operation(self, run, mocker):
        run("initialize", "--caller", "admin")
        mocker.patch.object(
            LeaderboardService,
            "query_leaderboard",
            side_effect=OperationalError("SELECT 1", {}, Exception("database is locked")),
        )

        code, payload = run("leaderboard")

        assert code == EXIT_STORE_FAILED
        assert payload["error"]["error_type"] == "OperationalError"
        assert "database is locked" in payload["error"]["message"]


class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_submit_arguments(self):
        args = build_parser().parse_args(["submit", "--caller", "alice", "7", "--player", "bob"])

        assert (args.command, args.caller, args.score, args.player) == ("submit", "alice", "7", "bob")
