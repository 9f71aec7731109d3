"""Configuration file handling.

The generator reads `gqlc.json`, `gqlc.toml`, `gqlc.yaml` or `gqlc.yml` from the
working directory:

    {
      "input": {"schemas": "graphql/schemas", "operations": "graphql/operations"},
      "output": {"location": "graphql", "language": "typescript", "suffix": "_gqlc"},
      "generation": {"strict": false, "scalars": {"DateTime": {"validator": "z.string()"}}}
    }

`input.schemas` may also be an http(s) URL, in which case the schema is
fetched through introspection.
"""

import json
import logging
import tomllib
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILES = ("gqlc.json", "gqlc.toml", "gqlc.yaml", "gqlc.yml")


class InputConfig(BaseModel):
    """Where the schema and operations come from."""
    schemas: str = "graphql/schemas"
    operations: str = "graphql/operations"
    authorization: str | None = None

    @property
    def schema_is_url(self) -> bool:
        return self.schemas.startswith(("http://", "https://"))


class OutputConfig(BaseModel):
    """Where and how the generated modules are written."""
    location: str = "graphql"
    language: Literal["typescript"] = "typescript"
    suffix: str = "_gqlc"

    @property
    def schema_filename(self) -> str:
        return f"schema{self.suffix}.ts"

    @property
    def operations_filename(self) -> str:
        return f"operations{self.suffix}.ts"


class ScalarConfig(BaseModel):
    """Validator and TypeScript type for a custom scalar."""
    validator: str = "z.any()"
    ts_type: str = "any"


class GenerationConfig(BaseModel):
    strict: bool = False
    scalars: dict[str, ScalarConfig] = Field(default_factory=dict)
    header: str | None = None


class GeneratorConfig(BaseModel):
    """Complete generator configuration."""
    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)


def find_config(directory: Path | str = ".") -> Path | None:
    """Return the first config file present in a directory."""
    for name in CONFIG_FILES:
        candidate = Path(directory) / name
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | str | None = None) -> GeneratorConfig:
    """Load configuration from a file.

    Args:
        path: Explicit config file. When omitted, the names in CONFIG_FILES are
            looked up in order in the working directory; defaults apply if none exists.

    Raises:
        ConfigError: If the file cannot be read or is invalid.
    """
    if path is None:
        path = find_config()
        if path is None:
            logger.debug("No config file found, using defaults")
            return GeneratorConfig()

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        if path.suffix == ".toml":
            data = tomllib.loads(text)
        elif path.suffix == ".json":
            data = json.loads(text)
        elif path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            raise ConfigError(f"Unsupported config format: {path.suffix}")
    except (ValueError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from e

    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e


def _toml_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value)


def dump_config(config: GeneratorConfig, fmt: str = "json") -> str:
    """Serialize a config as JSON, TOML or YAML text."""
    data = config.model_dump(exclude_none=True)
    if fmt == "json":
        return json.dumps(data, indent=2) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False)
    if fmt != "toml":
        raise ConfigError(f"Unsupported config format: {fmt}")

    # Only the shapes GeneratorConfig produces: sections of scalars and one table of tables
    lines = []
    for section, values in data.items():
        tables = {k: v for k, v in values.items() if isinstance(v, dict)}
        lines.append(f"[{section}]")
        for key, value in values.items():
            if key not in tables:
                lines.append(f"{key} = {_toml_value(value)}")
        lines.append("")
        for table, entries in tables.items():
            for name, options in entries.items():
                lines.append(f"[{section}.{table}.{json.dumps(name)}]")
                lines.extend(f"{k} = {_toml_value(v)}" for k, v in options.items())
                lines.append("")
    return "\n".join(lines)


def save_config(
    config: GeneratorConfig,
    fmt: str = "json",
    directory: Path | str = ".",
) -> Path:
    """Write a config file (gqlc.json, gqlc.toml or gqlc.yaml) and return its path."""
    content = dump_config(config, fmt)
    path = Path(directory) / f"gqlc.{fmt}"
    path.write_text(content, encoding="utf-8")
    return path
