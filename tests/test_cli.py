"""
Tests for the command line entry point's error handling.
"""
import pytest

import main as cli
from opensdr.linkedin.errors import ProfileNotFoundError


@pytest.fixture
def argv(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda: None)
    monkeypatch.setattr("sys.argv", ["opensdr", "profile", "Jane Doe"])


def _failing_run(error):
    async def run(args):
        raise error

    return run


class TestMain:
    def test_missing_api_key_exits_with_message(self, argv, monkeypatch, capsys):
        monkeypatch.setattr(
            cli, "run", _failing_run(EnvironmentError("GEMINI_API_KEY is required in .env"))
        )

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 1
        assert "GEMINI_API_KEY is required in .env" in capsys.readouterr().out

    def test_engine_error_exits_with_message(self, argv, monkeypatch, capsys):
        monkeypatch.setattr(cli, "run", _failing_run(ProfileNotFoundError("Jane Doe")))

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 1
        assert "No profile found for Jane Doe" in capsys.readouterr().out

    def test_success_exits_with_run_result(self, argv, monkeypatch):
        async def run(args):
            assert args.command == "profile"
            assert args.person == "Jane Doe"
            return 0

        monkeypatch.setattr(cli, "run", run)

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 0
