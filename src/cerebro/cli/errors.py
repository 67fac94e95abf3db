"""Rich error messages — actionable feedback for the CLI.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from cerebro.cli.errors import err_no_api_key
    console.print(err_no_api_key("gemini"))
    raise typer.Exit(1)
"""

from __future__ import annotations

_ENV_MAP = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "cohere": "COHERE_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "azure": "AZURE_API_KEY",
}


def err_no_api_key(provider: str) -> str:
    """No API key for *provider*.

    Example:
        No API key for 'gemini'. Set:  export GEMINI_API_KEY=...
    """
    env_var = _ENV_MAP.get(provider.lower(), f"{provider.upper()}_API_KEY")
    return (
        f"[red]Error:[/] No API key for '{provider}'.\n"
        f"  Set:  export {env_var}=..."
    )


def err_no_sources() -> str:
    """ingest called without --source."""
    return (
        "[red]Error:[/] No --source specified.\n"
        "  Run:  cerebro ingest --store <ID> --source PATH"
    )


def err_source_missing(path: str) -> str:
    """A --source path does not exist."""
    return (
        f"[red]Error:[/] Source file not found: '{path}'\n"
        "  Check the path and try again."
    )


def err_unknown_collection(collection_id: str) -> str:
    """Collection id not found in cache or durable mirror."""
    return (
        f"[yellow]Unknown notebook:[/] '{collection_id}' has no documents.\n"
        "  Run:  cerebro status  to list notebooks, or  cerebro create  to make one."
    )


def err_generation_failed(message: str) -> str:
    """Generation provider failed or timed out."""
    return (
        f"[red]Error:[/] The answer could not be generated: {message}\n"
        "  Check the provider status or raise generation.timeout_seconds in cerebro.yaml."
    )


def err_config(message: str) -> str:
    """cerebro.yaml or ~/.cerebro/config.yaml is invalid."""
    return f"[red]Config error:[/] {message}"


def warn_mirror_disabled() -> str:
    """store.mirror is false: nothing survives this process."""
    return (
        "[yellow]⚠[/] store.mirror is disabled; notebooks live only in this process.\n"
        "  Set  store.mirror: true  in cerebro.yaml to keep them between commands."
    )
