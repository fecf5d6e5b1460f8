"""
Unit tests for command-line handling that never touches the network.
"""

from pathlib import Path

import pytest

from minihttp import cli
from minihttp.__main__ import main


@pytest.fixture
def no_network(monkeypatch):
    """Fail the test if anything tries to connect."""
    def refuse(*args, **kwargs):
        raise AssertionError("network access attempted")

    monkeypatch.setattr(cli.HTTPClient, "fetch", refuse)


class TestClientUsage:
    """Usage errors exit with 1 before any connection is made."""

    @pytest.mark.parametrize("argv", [
        [],
        ["http://"],
        ["short"],
        ["-p", "80x", "http://localhost/"],
        ["-p", "1234567", "http://localhost/"],
        ["-o", "a.html", "-d", ".", "http://localhost/"],
        ["-x", "http://localhost/"],
    ])
    def test_usage_errors(self, argv, no_network, capsys):
        assert cli.client_main(argv) == cli.EXIT_USAGE

        assert "Usage Error!" in capsys.readouterr().err

    def test_missing_output_directory(self, tmp_path: Path, no_network, capsys):
        argv = ["-d", str(tmp_path / "nope"), "http://localhost/"]

        assert cli.client_main(argv) == cli.EXIT_USAGE
        assert "Invalid directory" in capsys.readouterr().err


class TestServerUsage:

    @pytest.mark.parametrize("argv", [
        ["-p", "abc", "."],
        ["-i", "a" * 32, "."],
        ["-q", "."],
    ])
    def test_usage_errors(self, argv, capsys):
        assert cli.server_main(argv) == cli.EXIT_USAGE
        assert "Usage Error!" in capsys.readouterr().err

    def test_missing_doc_root(self, monkeypatch, capsys):
        monkeypatch.delenv("MINIHTTP_DOC_ROOT", raising=False)

        assert cli.server_main([]) == cli.EXIT_USAGE

    def test_nonexistent_doc_root(self, tmp_path: Path, capsys):
        assert cli.server_main([str(tmp_path / "nope")]) == cli.EXIT_USAGE
        assert "Invalid directory" in capsys.readouterr().err


class TestModuleEntryPoint:

    def test_unknown_program(self, capsys):
        assert main(["browser"]) == 1

    def test_dispatches_to_client(self, no_network):
        assert main(["client", "short"]) == cli.EXIT_USAGE

    def test_exit_codes_are_distinct_where_it_matters(self):
        assert len({cli.EXIT_SUCCESS, cli.EXIT_USAGE, cli.EXIT_PROTOCOL, cli.EXIT_STATUS}) == 4


class TestClientFailures:

    def test_unencodable_host_is_io_failure(self, capsys):
        """Test that a host the IDNA codec rejects exits 1, no traceback."""
        assert cli.client_main(["-p", "1", "http://a..b/x"]) == cli.EXIT_FAILURE
        assert capsys.readouterr().out == ""
