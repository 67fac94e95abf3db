"""Cerebro configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site, not in this module)
  2. Environment variables  (CEREBRO_GENERATION_MODEL, CEREBRO_EMBEDDING_MODEL, CEREBRO_DB)
  3. Per-project cerebro.yaml
  4. Global ~/.cerebro/config.yaml  (model defaults only, no API keys)
  5. Hardcoded defaults

Global config must never contain API keys; use environment variables instead.
All YAML reads use yaml.safe_load(), never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".cerebro"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "cerebro.yaml"

# Fields that suggest an API key; forbidden in global config.
# Does NOT match legitimate config keys like max_tokens or top_k.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"  # api_key, api-key, api_secret, apikey
    r"|_token$"                  # github_token, access_token, auth_token (suffix)
    r"|^token$"                  # exactly "token" (standalone)
    r"|_secret$"                 # my_secret, client_secret (suffix)
    r"|^secret$"                 # exactly "secret" (standalone)
    r"|passw(?:ord|d)"           # password, passwd
    r"|credential",              # credential, credentials
    re.IGNORECASE,
)

# Known top-level sections. Unknown keys produce a warning
_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["embedding", "generation", "retrieval", "chunker", "ingest", "store"]
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class EmbeddingCfg:
    """Embedding model configuration (cerebro.yaml: embedding:)."""

    model: str = "gemini/text-embedding-004"


@dataclass
class GenerationCfg:
    """LLM generation configuration (cerebro.yaml: generation:).

    Attributes:
        model: LiteLLM model string used to answer queries.
        timeout_seconds: Bounded wait for one generation call.
        max_tokens: Maximum output tokens per answer.
    """

    model: str = "gemini/gemini-1.5-flash"
    timeout_seconds: float = 120.0
    max_tokens: int = 2048


@dataclass
class RetrievalCfg:
    """Hybrid ranking configuration (cerebro.yaml: retrieval:)."""

    top_k: int = 5
    semantic_weight: float = 0.7
    lexical_weight: float = 0.3
    min_term_length: int = 3
    preview_chars: int = 200


@dataclass
class ChunkerCfg:
    """Paragraph chunker configuration (cerebro.yaml: chunker:)."""

    target_size: int = 1000
    max_text_chars: int = 50_000


@dataclass
class IngestCfg:
    """Embedding worker pool (cerebro.yaml: ingest:).

    Attributes:
        workers: Concurrent embedding calls per ingestion.
        delay_seconds: Courtesy pause after each embedding call.
    """

    workers: int = 1
    delay_seconds: float = 0.2


@dataclass
class StoreCfg:
    """Corpus store configuration (cerebro.yaml: store:).

    Attributes:
        db: Path of the SQLite durable mirror.
        mirror: Whether to mirror collections to *db* at all.
        max_collections: LRU capacity of the in-memory cache (None = unbounded).
    """

    db: str = ".cerebro.db"
    mirror: bool = True
    max_collections: int | None = None


@dataclass
class CerebroConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    generation: GenerationCfg = field(default_factory=GenerationCfg)
    retrieval: RetrievalCfg = field(default_factory=RetrievalCfg)
    chunker: ChunkerCfg = field(default_factory=ChunkerCfg)
    ingest: IngestCfg = field(default_factory=IngestCfg)
    store: StoreCfg = field(default_factory=StoreCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate(cfg: CerebroConfig) -> None:
    if cfg.chunker.target_size < 1:
        raise ConfigError(f"chunker.target_size must be >= 1, got {cfg.chunker.target_size}")
    if cfg.retrieval.top_k < 1:
        raise ConfigError(f"retrieval.top_k must be >= 1, got {cfg.retrieval.top_k}")
    if cfg.ingest.workers < 1:
        raise ConfigError(f"ingest.workers must be >= 1, got {cfg.ingest.workers}")
    if cfg.ingest.delay_seconds < 0:
        raise ConfigError(
            f"ingest.delay_seconds must be >= 0, got {cfg.ingest.delay_seconds}"
        )
    if cfg.generation.timeout_seconds <= 0:
        raise ConfigError(
            f"generation.timeout_seconds must be > 0, got {cfg.generation.timeout_seconds}"
        )
    if cfg.store.max_collections is not None and cfg.store.max_collections < 1:
        raise ConfigError(
            f"store.max_collections must be >= 1 or null, got {cfg.store.max_collections}"
        )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> CerebroConfig:
    """Build a *CerebroConfig* from a merged raw YAML dict."""
    cfg = CerebroConfig()

    if "embedding" in data:
        e = data["embedding"] or {}
        cfg.embedding = EmbeddingCfg(model=str(e.get("model", cfg.embedding.model)))

    if "generation" in data:
        g = data["generation"] or {}
        cfg.generation = GenerationCfg(
            model=str(g.get("model", cfg.generation.model)),
            timeout_seconds=float(
                g.get("timeout_seconds", cfg.generation.timeout_seconds)
            ),
            max_tokens=int(g.get("max_tokens", cfg.generation.max_tokens)),
        )

    if "retrieval" in data:
        r = data["retrieval"] or {}
        cfg.retrieval = RetrievalCfg(
            top_k=int(r.get("top_k", cfg.retrieval.top_k)),
            semantic_weight=float(r.get("semantic_weight", cfg.retrieval.semantic_weight)),
            lexical_weight=float(r.get("lexical_weight", cfg.retrieval.lexical_weight)),
            min_term_length=int(r.get("min_term_length", cfg.retrieval.min_term_length)),
            preview_chars=int(r.get("preview_chars", cfg.retrieval.preview_chars)),
        )

    if "chunker" in data:
        c = data["chunker"] or {}
        cfg.chunker = ChunkerCfg(
            target_size=int(c.get("target_size", cfg.chunker.target_size)),
            max_text_chars=int(c.get("max_text_chars", cfg.chunker.max_text_chars)),
        )

    if "ingest" in data:
        i = data["ingest"] or {}
        cfg.ingest = IngestCfg(
            workers=int(i.get("workers", cfg.ingest.workers)),
            delay_seconds=float(i.get("delay_seconds", cfg.ingest.delay_seconds)),
        )

    if "store" in data:
        s = data["store"] or {}
        max_collections = s.get("max_collections", cfg.store.max_collections)
        cfg.store = StoreCfg(
            db=str(s.get("db", cfg.store.db)),
            mirror=bool(s.get("mirror", cfg.store.mirror)),
            max_collections=int(max_collections) if max_collections is not None else None,
        )

    return cfg


def _apply_env_overrides(cfg: CerebroConfig) -> CerebroConfig:
    """Apply CEREBRO_* environment variable overrides (layer 2)."""
    if model := os.environ.get("CEREBRO_GENERATION_MODEL"):
        cfg.generation.model = model
    if model := os.environ.get("CEREBRO_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    if db := os.environ.get("CEREBRO_DB"):
        cfg.store.db = db
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> CerebroConfig:
    """Load and return a merged *CerebroConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *cerebro.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *CerebroConfig* with env var overrides applied.

    Raises:
        ConfigError: If global config contains API-key-like fields, or a value
            is out of range.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: per-project config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)

    _validate(cfg)
    return cfg


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.cerebro/config.yaml`` with defaults if it does not exist.

    Creates parent directory with mode 0o700 and the config file with
    mode 0o600 (owner-readable only).

    Args:
        global_config_path: Override path (for testing).

    Returns:
        Path to the global config file.
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    if not target.exists():
        content = (
            "# Cerebro global configuration — model defaults only.\n"
            "# NEVER store API keys here — use environment variables:\n"
            "#   export GEMINI_API_KEY=...\n"
            "#   export OPENAI_API_KEY=sk-...\n"
            "\n"
            "embedding:\n"
            "  model: gemini/text-embedding-004\n"
            "\n"
            "generation:\n"
            "  model: gemini/gemini-1.5-flash\n"
        )
        target.write_text(content, encoding="utf-8")
        target.chmod(0o600)

    return target
