"""Report configuration.

A ReportConfig is built once per invocation (from a YAML/JSON file,
command-line overrides, or both) and passed explicitly into the
pipeline, sources and renderers.
"""

import json
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from zerotrace.core.errors import ConfigError
from zerotrace.models.command import CommandStatus, ModuleKind
from zerotrace.normalizer.identity import DEFAULT_PROFILE_ROOTS

OutputMode = Literal["stdout", "csv", "file", "timeline"]


class ReportConfig(BaseModel):
    """Options for one reporting run."""

    modules: list[ModuleKind] = Field(
        default_factory=lambda: list(ModuleKind),
        min_length=1,
        description="Modules whose results are processed",
    )
    action_id: int | None = Field(
        default=None,
        ge=1,
        description="Restrict to one action (None processes all actions)",
    )
    statuses: set[str] = Field(
        default_factory=lambda: {CommandStatus.SUCCESS},
        description="Command statuses whose results are processed",
    )
    profile_tokens: set[str] = Field(
        default_factory=set,
        description="Directory names treated as user profiles in file paths",
    )
    profile_roots: set[str] = Field(
        default_factory=lambda: set(DEFAULT_PROFILE_ROOTS),
        description="Directories whose children are user profiles",
    )
    strict_timestamps: bool = Field(
        default=False,
        description="Abort the run on the first unparseable timestamp",
    )
    output_mode: OutputMode = Field(default="stdout", description="Report renderer")
    output_dir: Path | None = Field(
        default=None,
        description="Directory for csv/file/timeline output (default: current directory)",
    )

    model_config = {"extra": "forbid"}

    @field_validator("modules")
    @classmethod
    def dedupe_modules(cls, v: list[ModuleKind]) -> list[ModuleKind]:
        """Keep the first mention of each module."""
        return list(dict.fromkeys(v))

    def merged(self, **overrides: Any) -> "ReportConfig":
        """Return a copy with non-empty overrides applied.

        None values and empty collections are ignored so unset CLI
        options do not clobber values from the config file.
        """
        updates = {
            key: value
            for key, value in overrides.items()
            if value is not None and value != () and value != [] and value != set()
        }
        data = self.model_dump()
        data.update(updates)
        try:
            return ReportConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(
                "Invalid command-line options",
                errors=_format_validation_errors(e),
            ) from e

    @property
    def report_name(self) -> str:
        """Base file name for rendered reports."""
        if self.action_id is None:
            return "All-Actions"
        return f"Action-{self.action_id}"


def load_config(path: Path) -> ReportConfig:
    """Load a ReportConfig from a YAML or JSON file.

    Args:
        path: Config file path

    Returns:
        Validated ReportConfig

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file '{path}' not found", path=str(path))

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file '{path}': {e}", path=str(path)) from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse config file '{path}': {e}", path=str(path)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file '{path}' must contain a mapping",
            path=str(path),
        )

    try:
        return ReportConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Config file '{path}' failed validation",
            path=str(path),
            errors=_format_validation_errors(e),
        ) from e


def _format_validation_errors(error: ValidationError) -> list[str]:
    """Flatten pydantic errors to 'field: message' strings."""
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        messages.append(f"{location}: {item['msg']}")
    return messages
