"""cerebro init — set up config files and the durable mirror.

Creates (existing files are left untouched):
  ~/.cerebro/config.yaml   — global model defaults (mode 0o600, no API keys)
  cerebro.yaml             — per-project settings with the defaults spelled out
  .cerebro.db              — durable mirror with schema
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from cerebro.cli.runtime import console, setup_logging
from cerebro.config import ensure_global_config
from cerebro.db.connection import Database

_PROJECT_CONFIG = """\
# Cerebro project configuration. API keys belong in environment variables.

retrieval:
  top_k: 5
  semantic_weight: 0.7
  lexical_weight: 0.3

chunker:
  target_size: 1000

ingest:
  workers: 1
  delay_seconds: 0.2

store:
  db: .cerebro.db
  mirror: true
"""


def init_cmd(
    project_dir: Annotated[
        Path,
        typer.Argument(help="Directory to initialize. Defaults to current directory."),
    ] = Path("."),
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """Create the global config, cerebro.yaml and the durable mirror."""
    setup_logging(verbose)
    project_dir = project_dir.resolve()
    project_dir.mkdir(parents=True, exist_ok=True)

    global_path = ensure_global_config()
    console.print(f"  [green]✓[/] {global_path}")

    project_cfg = project_dir / "cerebro.yaml"
    if project_cfg.exists():
        console.print(f"  [dim]· {project_cfg.name} exists, kept[/]")
    else:
        project_cfg.write_text(_PROJECT_CONFIG, encoding="utf-8")
        console.print(f"  [green]✓[/] {project_cfg.name}")

    db_path = project_dir / ".cerebro.db"
    Database(db_path).open().close()
    console.print(f"  [green]✓[/] {db_path.name}")

    console.print("\nNext:  cerebro create \"My notebook\"")
