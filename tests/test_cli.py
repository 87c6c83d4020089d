"""Tests for CLI interface.

Test Coverage:
    - Argument parsing
    - Command routing
    - blocks command with mocked pipeline
    - decode command on files and stdin
"""

import io
import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from blockscope.cli import cmd_decode, create_parser, main
from blockscope.clients import UpstreamUnavailable
from blockscope.encoding import encode
from blockscope.models import Sample

SAMPLES = [Sample(epoch=1_000_000, volume=3), Sample(epoch=2_000_000, volume=1)]


class TestParser:
    """Test CLI parser creation."""

    def test_parser_prog_name(self):
        assert create_parser().prog == "blockscope"

    def test_blocks_defaults(self):
        args = create_parser().parse_args(["blocks"])
        assert args.command == "blocks"
        assert args.start is None
        assert args.end is None
        assert args.db is None

    def test_blocks_range(self):
        args = create_parser().parse_args(["blocks", "--start", "1", "--end", "50", "--db", "tx.db"])
        assert args.start == 1
        assert args.end == 50
        assert args.db == Path("tx.db")

    def test_blocks_rejects_non_integer(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["blocks", "--start", "abc"])

    def test_decode_requires_file(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["decode"])


class TestBlocksCommand:
    """Test the blocks command with a mocked orchestrator."""

    def test_prints_envelope(self, capsys, tmp_path):
        envelope = {"isCached": True, **encode(SAMPLES).to_dict()}

        with patch("blockscope.cli.RangeOrchestrator") as orch_cls:
            orch_cls.return_value.get_encoded_blocks = AsyncMock(return_value=envelope)
            exit_code = main(["blocks", "--start", "1", "--end", "2", "--db", str(tmp_path / "missing.db")])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == envelope
        orch_cls.return_value.get_encoded_blocks.assert_awaited_once_with(1, 2)

    def test_upstream_failure(self, capsys, tmp_path):
        with patch("blockscope.cli.RangeOrchestrator") as orch_cls:
            orch_cls.return_value.get_encoded_blocks = AsyncMock(
                side_effect=UpstreamUnavailable("Network error: refused")
            )
            exit_code = main(["blocks", "--db", str(tmp_path / "missing.db")])

        assert exit_code == 1
        err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert err == {"error": "Failed to fetch block data", "details": "Network error: refused"}


class TestDecodeCommand:
    """Test the decode command."""

    def test_decodes_file(self, capsys, tmp_path):
        path = tmp_path / "envelope.json"
        path.write_text(json.dumps({"isCached": True, **encode(SAMPLES).to_dict()}))

        exit_code = main(["decode", str(path)])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == [s.to_dict() for s in SAMPLES]

    def test_decodes_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(encode(SAMPLES).to_dict())))

        args = create_parser().parse_args(["decode", "-"])
        assert cmd_decode(args) == 0
        assert len(json.loads(capsys.readouterr().out)) == 2

    def test_malformed_series(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        payload = encode(SAMPLES).to_dict()
        payload["length"] = 5
        path.write_text(json.dumps(payload))

        assert main(["decode", str(path)]) == 1
        assert "Expected 4 deltas" in capsys.readouterr().err

    def test_missing_file(self, capsys, tmp_path):
        assert main(["decode", str(tmp_path / "nope.json")]) == 1


class TestMain:
    """Test command routing."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_version(self, capsys):
        assert main(["version"]) == 0
        assert "blockscope v" in capsys.readouterr().out
