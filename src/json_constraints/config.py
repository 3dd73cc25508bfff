"""
config.py

PURPOSE: Settings for the command-line export tool.
DEPENDENCIES: pydantic, pydantic-settings

ARCHITECTURE NOTES:
Settings come from (in priority order):
1. CLI flags (highest priority)
2. Environment variables (JSON_CONSTRAINTS_*)
3. Defaults (lowest priority)

The compilers and the validator never read settings; they are pure functions
of the field tree. Only the CLI consults this module.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings for the export CLI."""

    output_dir: Path = Field(
        default=Path("JsonConstraintExamples"),
        description="Directory that export writes grammar and template files to",
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug output",
    )
    template_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentation of exported templates",
    )

    model_config = {"env_prefix": "JSON_CONSTRAINTS_"}

    def ensure_output_dir(self) -> Path:
        """Ensure the output directory exists and return it."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir

    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug output is enabled, otherwise log_level."""
        return "DEBUG" if self.debug else self.log_level.upper()


def get_settings() -> Settings:
    """Get settings, loading from environment."""
    return Settings()
