"""``streamchat check`` -- Verify environment and configuration."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

from rich.console import Console

from streamchat_cli.config import ConfigManager
from streamchat_cli.ui.panels import ACCENT, status_table

_PASS = "[green]PASS[/green]"
_FAIL = "[red]FAIL[/red]"
_SKIP = "[yellow]SKIP[/yellow]"

_DEPENDENCIES = (
    ("pydantic", "pydantic"),
    ("pydantic_settings", "pydantic-settings"),
    ("httpx", "httpx"),
    ("yaml", "pyyaml"),
    ("textual", "textual (tui)"),
    ("typer", "typer (cli)"),
    ("rich", "rich (cli)"),
)


def _check_python_version() -> tuple[str, str, str]:
    version = sys.version_info
    version_str = f"{version.major}.{version.minor}.{version.micro}"
    if version >= (3, 13):
        return ("Python version", _PASS, version_str)
    return ("Python version", _FAIL, f"{version_str} (requires >=3.13)")


def _check_module(module_name: str, label: str) -> tuple[str, str, str]:
    """Check whether a Python module is importable."""
    try:
        mod = importlib.import_module(module_name)
    except ImportError:
        return (label, _FAIL, "not installed")
    return (label, _PASS, str(getattr(mod, "__version__", "installed")))


def _check_file(path: Path, label: str) -> tuple[str, str, str]:
    if path.exists():
        return (label, _PASS, str(path))
    return (label, _SKIP, f"not found: {path}")


def check() -> None:
    """Check the local environment and show the effective webhook target."""
    console = Console()
    manager = ConfigManager()

    rows: list[tuple[str, str, str]] = [_check_python_version()]
    rows.extend(_check_module(name, label) for name, label in _DEPENDENCIES)
    rows.append(_check_file(manager.global_config_path, "Global config"))
    rows.append(_check_file(manager.project_config_path, "Project config"))

    try:
        config = manager.load()
    except ValueError as exc:
        rows.append(("Configuration", _FAIL, str(exc).splitlines()[0]))
    else:
        target = "local echo" if config.transport == "echo" else config.webhook_url
        rows.append(("Transport", _PASS, target))

    console.print()
    status_table("Environment Check", rows, console=console)
    console.print()

    pass_count = sum(1 for _, s, _ in rows if "PASS" in s)
    console.print(f"  [{ACCENT}]{pass_count}/{len(rows)}[/{ACCENT}] checks passed.\n")
