"""Runtime configuration for the HTTP service and the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from finchart import COMPANY_COLUMN, DEFAULT_DATA_FILE, FIELD_COLUMN


def _default_data_file() -> Path:
    return Path.cwd() / DEFAULT_DATA_FILE


@dataclass(frozen=True)
class Settings:
    """Service settings. Overrides come from CLI options, never the environment."""

    data_file: Path = field(default_factory=_default_data_file)
    company_column: str = COMPANY_COLUMN
    field_column: str = FIELD_COLUMN
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        object.__setattr__(self, "data_file", Path(self.data_file))
        if not self.company_column or not self.field_column:
            raise ValueError("company_column and field_column must be non-empty")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise TypeError("port must be an integer")
        if not 1 <= self.port <= 65535:
            raise ValueError("port must be between 1 and 65535")
