"""Tests for cerebro config loader."""

from __future__ import annotations

import stat
import warnings
from pathlib import Path

import pytest
import yaml

from cerebro.config import (
    CerebroConfig,
    ConfigError,
    ensure_global_config,
    load_config,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_yaml(path: Path, data: dict) -> None:
    path.write_text(yaml.dump(data), encoding="utf-8")


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for var in ("CEREBRO_GENERATION_MODEL", "CEREBRO_EMBEDDING_MODEL", "CEREBRO_DB"):
        monkeypatch.delenv(var, raising=False)


def _load(tmp_path: Path, global_cfg: Path | None = None) -> CerebroConfig:
    return load_config(
        project_dir=tmp_path,
        global_config_path=global_cfg or tmp_path / "nonexistent" / "config.yaml",
    )


# ---------------------------------------------------------------------------
# Defaults (no config files present)
# ---------------------------------------------------------------------------


def test_load_config_defaults_no_files(tmp_path: Path) -> None:
    """No config files → all hardcoded defaults."""
    cfg = _load(tmp_path)

    assert cfg.embedding.model == "gemini/text-embedding-004"
    assert cfg.generation.model == "gemini/gemini-1.5-flash"
    assert cfg.generation.timeout_seconds == 120.0
    assert cfg.retrieval.top_k == 5
    assert cfg.retrieval.semantic_weight == 0.7
    assert cfg.retrieval.lexical_weight == 0.3
    assert cfg.retrieval.min_term_length == 3
    assert cfg.retrieval.preview_chars == 200
    assert cfg.chunker.target_size == 1000
    assert cfg.chunker.max_text_chars == 50_000
    assert cfg.ingest.workers == 1
    assert cfg.ingest.delay_seconds == 0.2
    assert cfg.store.db == ".cerebro.db"
    assert cfg.store.mirror is True
    assert cfg.store.max_collections is None


# ---------------------------------------------------------------------------
# Layering
# ---------------------------------------------------------------------------


def test_global_overrides_defaults(tmp_path: Path) -> None:
    global_cfg = tmp_path / "config.yaml"
    _write_yaml(global_cfg, {"generation": {"model": "openai/gpt-4o-mini"}})

    cfg = _load(tmp_path, global_cfg)
    assert cfg.generation.model == "openai/gpt-4o-mini"
    assert cfg.generation.timeout_seconds == 120.0
    assert cfg.embedding.model == "gemini/text-embedding-004"


def test_project_overrides_global(tmp_path: Path) -> None:
    global_cfg = tmp_path / "config.yaml"
    _write_yaml(global_cfg, {"retrieval": {"top_k": 8, "preview_chars": 100}})
    _write_yaml(tmp_path / "cerebro.yaml", {"retrieval": {"top_k": 3}})

    cfg = _load(tmp_path, global_cfg)
    assert cfg.retrieval.top_k == 3
    # Deep merge keeps sibling keys from the global layer
    assert cfg.retrieval.preview_chars == 100


def test_env_overrides_files(tmp_path: Path, monkeypatch) -> None:
    _write_yaml(tmp_path / "cerebro.yaml", {"generation": {"model": "openai/gpt-4o"}})
    monkeypatch.setenv("CEREBRO_GENERATION_MODEL", "anthropic/claude-3-5-haiku-20241022")
    monkeypatch.setenv("CEREBRO_EMBEDDING_MODEL", "openai/text-embedding-3-small")
    monkeypatch.setenv("CEREBRO_DB", "/tmp/other.db")

    cfg = _load(tmp_path)
    assert cfg.generation.model == "anthropic/claude-3-5-haiku-20241022"
    assert cfg.embedding.model == "openai/text-embedding-3-small"
    assert cfg.store.db == "/tmp/other.db"


def test_store_section_parsed(tmp_path: Path) -> None:
    _write_yaml(
        tmp_path / "cerebro.yaml",
        {"store": {"db": "notes.db", "mirror": False, "max_collections": 4}},
    )
    cfg = _load(tmp_path)
    assert cfg.store.db == "notes.db"
    assert cfg.store.mirror is False
    assert cfg.store.max_collections == 4


def test_empty_section_keeps_defaults(tmp_path: Path) -> None:
    (tmp_path / "cerebro.yaml").write_text("ingest:\n", encoding="utf-8")
    cfg = _load(tmp_path)
    assert cfg.ingest.workers == 1


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def test_global_config_rejects_api_key(tmp_path: Path) -> None:
    global_cfg = tmp_path / "config.yaml"
    _write_yaml(global_cfg, {"generation": {"api_key": "sk-secret"}})

    with pytest.raises(ConfigError, match="forbidden key 'generation.api_key'"):
        _load(tmp_path, global_cfg)


def test_global_config_allows_max_tokens(tmp_path: Path) -> None:
    global_cfg = tmp_path / "config.yaml"
    _write_yaml(global_cfg, {"generation": {"max_tokens": 512}})
    assert _load(tmp_path, global_cfg).generation.max_tokens == 512


def test_unknown_key_warns(tmp_path: Path) -> None:
    _write_yaml(tmp_path / "cerebro.yaml", {"telemetry": {"on": True}})
    with warnings.catch_warnings(record=True) as w:
        warnings.simplefilter("always")
        _load(tmp_path)
    assert any("telemetry" in str(x.message) for x in w)


@pytest.mark.parametrize(
    "data",
    [
        {"chunker": {"target_size": 0}},
        {"retrieval": {"top_k": 0}},
        {"ingest": {"workers": 0}},
        {"ingest": {"delay_seconds": -1}},
        {"generation": {"timeout_seconds": 0}},
        {"store": {"max_collections": 0}},
    ],
)
def test_out_of_range_values_rejected(tmp_path: Path, data: dict) -> None:
    _write_yaml(tmp_path / "cerebro.yaml", data)
    with pytest.raises(ConfigError):
        _load(tmp_path)


# ---------------------------------------------------------------------------
# ensure_global_config
# ---------------------------------------------------------------------------


def test_ensure_global_config_creates_file(tmp_path: Path) -> None:
    target = tmp_path / ".cerebro" / "config.yaml"
    path = ensure_global_config(target)

    assert path == target
    assert target.exists()
    assert stat.S_IMODE(target.stat().st_mode) == 0o600
    data = yaml.safe_load(target.read_text(encoding="utf-8"))
    assert data["generation"]["model"] == "gemini/gemini-1.5-flash"


def test_ensure_global_config_keeps_existing(tmp_path: Path) -> None:
    target = tmp_path / "config.yaml"
    target.write_text("generation:\n  model: openai/gpt-4o\n", encoding="utf-8")
    ensure_global_config(target)
    assert "openai/gpt-4o" in target.read_text(encoding="utf-8")
