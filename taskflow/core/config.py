"""
taskflow.core.config -- Configuration for the taskflow memory server.

Supports loading from YAML, environment variables, and programmatic
construction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

#: Environment variable naming the memory bank directory.
MEMORY_BANK_ENV = "MEMORY_BANK_PATH"
#: Environment variable naming the log level.
LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_MEMORY_BANK_PATH = "./memory-bank"

VALID_MODES = ("plan", "act")
VALID_TRANSPORTS = ("stdio", "sse", "streamable-http")


@dataclass
class Config:
    """
    Central configuration object.

    Construct directly, via ``Config.from_yaml(path)``, via
    ``Config.from_env()``, or via ``Config.from_memory_dir(path)``.
    """

    # -- storage ------------------------------------------------------------
    memory_bank_dir: Path = field(
        default_factory=lambda: Path(DEFAULT_MEMORY_BANK_PATH)
    )
    document_extension: str = ".md"

    # -- context cache ------------------------------------------------------
    cache_max_entries: int = 100
    cache_ttl_seconds: float = 15 * 60

    # -- operation tracker --------------------------------------------------
    operation_retention_seconds: float = 60 * 60

    # -- workflow mode ------------------------------------------------------
    default_mode: str = "plan"

    # -- logging ------------------------------------------------------------
    log_level: str = "INFO"
    structured_logging: bool = False  # emit JSON log lines when True

    # -- transport ----------------------------------------------------------
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8765

    # -----------------------------------------------------------------------
    # Construction helpers
    # -----------------------------------------------------------------------

    def __post_init__(self) -> None:
        self.memory_bank_dir = Path(self.memory_bank_dir).resolve()

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file.

        Keys may sit at the top level or under a ``taskflow:`` section.
        Unknown keys are ignored so the file can carry other settings.
        """
        import yaml

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as fh:
            raw: Dict[str, Any] = yaml.safe_load(fh) or {}

        data = raw.get("taskflow") or raw

        if "memory_bank_dir" in data:
            data["memory_bank_dir"] = Path(data["memory_bank_dir"])

        known = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in known}

        return cls(**filtered)

    @classmethod
    def from_memory_dir(cls, memory_dir: str | Path, **overrides: Any) -> "Config":
        """Quick constructor -- just point at a memory bank directory."""
        return cls(memory_bank_dir=Path(memory_dir), **overrides)

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Build from ``MEMORY_BANK_PATH`` / ``LOG_LEVEL``; overrides win."""
        values: Dict[str, Any] = {
            "memory_bank_dir": Path(
                os.environ.get(MEMORY_BANK_ENV, DEFAULT_MEMORY_BANK_PATH)
            ),
        }
        level = os.environ.get(LOG_LEVEL_ENV)
        if level:
            values["log_level"] = level.upper()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------

    def validate(self) -> None:
        """Raise ValueError on settings the components cannot honour."""
        if self.cache_max_entries < 1:
            raise ValueError(
                f"cache_max_entries must be >= 1, got {self.cache_max_entries}"
            )
        if self.cache_ttl_seconds <= 0:
            raise ValueError(
                f"cache_ttl_seconds must be positive, got {self.cache_ttl_seconds}"
            )
        if self.operation_retention_seconds <= 0:
            raise ValueError(
                "operation_retention_seconds must be positive, "
                f"got {self.operation_retention_seconds}"
            )
        if self.default_mode not in VALID_MODES:
            raise ValueError(
                f"Unknown default_mode {self.default_mode!r}; "
                f"expected one of {list(VALID_MODES)}"
            )
        if self.transport not in VALID_TRANSPORTS:
            raise ValueError(
                f"Unknown transport {self.transport!r}; "
                f"expected one of {list(VALID_TRANSPORTS)}"
            )
        if not self.document_extension.startswith("."):
            raise ValueError(
                f"document_extension must start with '.', got {self.document_extension!r}"
            )

    # -----------------------------------------------------------------------
    # Serialisation
    # -----------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to a plain dict (YAML/JSON-safe)."""
        return {
            "memory_bank_dir": str(self.memory_bank_dir),
            "document_extension": self.document_extension,
            "cache_max_entries": self.cache_max_entries,
            "cache_ttl_seconds": self.cache_ttl_seconds,
            "operation_retention_seconds": self.operation_retention_seconds,
            "default_mode": self.default_mode,
            "log_level": self.log_level,
            "structured_logging": self.structured_logging,
            "transport": self.transport,
            "host": self.host,
            "port": self.port,
        }
