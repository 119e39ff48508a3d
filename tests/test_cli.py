"""Tests for the taskflow command line."""

import json

from taskflow.__main__ import main
from taskflow.core.config import Config


def test_no_command_prints_help(capsys):
    main([])
    assert "usage" in capsys.readouterr().out.lower()


def test_init_creates_bank_and_config(tmp_dir, capsys):
    bank = tmp_dir / "bank"
    main(["init", "--memory-path", str(bank)])

    names = sorted(p.name for p in bank.iterdir())
    assert names == ["activeContext.md", "progress.md", "projectbrief.md"]

    config_path = tmp_dir / "taskflow.yaml"
    assert config_path.exists()
    cfg = Config.from_yaml(config_path)
    assert cfg.memory_bank_dir == bank.resolve()
    assert cfg.cache_ttl_seconds == 900

    assert "Initialized Memory Bank" in capsys.readouterr().out


def test_init_keeps_existing_documents(tmp_dir):
    bank = tmp_dir / "bank"
    bank.mkdir()
    (bank / "progress.md").write_text("mine", encoding="utf-8")
    main(["init", "--memory-path", str(bank)])
    assert (bank / "progress.md").read_text(encoding="utf-8") == "mine"


def test_stats(tmp_dir, capsys):
    bank = tmp_dir / "bank"
    main(["init", "--memory-path", str(bank)])
    capsys.readouterr()

    main(["stats", "--memory-path", str(bank)])
    stats = json.loads(capsys.readouterr().out)
    assert stats["file_count"] == 3
    assert stats["total_size_bytes"] > 0


def test_stats_missing_bank(tmp_dir, capsys):
    main(["stats", "--memory-path", str(tmp_dir / "absent")])
    stats = json.loads(capsys.readouterr().out)
    assert "error" in stats
