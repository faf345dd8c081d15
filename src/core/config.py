"""Configuration for the engine and the persistence layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

PERSISTENCE_BACKENDS = ("file", "sql")


@dataclass
class EngineConfig:
    thinking_delay: float = 1.0  # seconds an automated side "thinks" before placing
    seed: Optional[int] = None  # seed for the random move selection


@dataclass
class PersistenceConfig:
    backend: str = "file"
    directory: str = "saves"
    database_url: str = "sqlite:///reversi.db"
    slot: str = "Game"


@dataclass
class AppConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        engine_data = data.get("engine", {})
        seed = engine_data.get("seed")
        engine = EngineConfig(
            thinking_delay=float(engine_data.get("thinking_delay", 1.0)),
            seed=int(seed) if seed is not None else None,
        )
        if engine.thinking_delay < 0:
            raise ValueError("engine.thinking_delay cannot be negative")

        persistence_data = data.get("persistence", {})
        persistence = PersistenceConfig(
            backend=str(persistence_data.get("backend", "file")),
            directory=str(persistence_data.get("directory", "saves")),
            database_url=str(
                persistence_data.get("database_url", "sqlite:///reversi.db")
            ),
            slot=str(persistence_data.get("slot", "Game")),
        )
        if persistence.backend not in PERSISTENCE_BACKENDS:
            raise ValueError(
                f"persistence.backend must be one of {', '.join(PERSISTENCE_BACKENDS)}, got {persistence.backend!r}"
            )

        log_level = str(data.get("log_level", "INFO")).upper()
        return cls(engine=engine, persistence=persistence, log_level=log_level)


def load_config(path: Union[str, Path]) -> AppConfig:
    """Load AppConfig from a YAML file."""
    path = Path(path)
    with path.open() as f:
        data = yaml.safe_load(f)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data)}")
    return AppConfig.from_dict(data)
