"""Command-line session state.

Holds the ``--config`` option given to the top-level command and the engine
configuration resolved from it, so subcommands share one config lookup.
"""

from __future__ import annotations

from pathlib import Path

from .config import EngineConfig, discover_config


class _Session:
    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.engine_config: EngineConfig | None = None
        self.resolved_from: Path | None = None


_session = _Session()


def get_config_path() -> Path | None:
    """Config file given with ``--config``, if any."""
    return _session.config_path


def set_config_path(path: Path | None) -> None:
    """Record the ``--config`` option and forget any previously resolved config."""
    _session.config_path = path
    _session.engine_config = None
    _session.resolved_from = None


def engine_config(start_dir: Path | None = None) -> EngineConfig:
    """Resolve the engine config for this session.

    Uses the ``--config`` file when given, otherwise looks for
    ``workdeps_config.yaml`` in ``start_dir`` and the current directory.

    Raises:
        FileNotFoundError: If the ``--config`` file doesn't exist
        ValueError: If the config file is invalid
    """
    if _session.engine_config is None or _session.resolved_from != start_dir:
        _session.engine_config = discover_config(start_dir, _session.config_path)
        _session.resolved_from = start_dir
    return _session.engine_config
