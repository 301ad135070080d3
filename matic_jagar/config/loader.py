"""
Configuration file discovery and loading.

Resolves the search directories, finds the first config file, parses it by
extension, applies environment overrides, maps the result onto the typed
schema and validates it. Failures are raised as ConfigError subclasses;
deciding whether to exit is left to the caller.
"""

import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import yaml
from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import NotFoundError, ParseError, ResolutionError, SettingsError
from ..models.config import Config
from .defaults import (
    APP_DIR, CONFIG_NAME, CONFIG_SUBDIR, ENV_VAR_MAPPING, SUPPORTED_EXTENSIONS
)

logger = logging.getLogger(__name__)


class LoaderSettings(BaseSettings):
    """Loader settings with environment variable support"""
    model_config = SettingsConfigDict(
        env_prefix="MATIC_JAGAR_",
        case_sensitive=False,
        extra="ignore"
    )

    config_name: str = CONFIG_NAME
    app_dir: str = APP_DIR
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept level names in any case"""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def config_dir(self) -> Path:
        """Home-relative directory holding the config file"""
        return home_directory() / self.app_dir / CONFIG_SUBDIR


def load_settings() -> LoaderSettings:
    """Read loader settings from the environment"""
    try:
        return LoaderSettings()
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise SettingsError(f"invalid loader settings: {details}") from e


def home_directory() -> Path:
    """Return the current user's home directory"""
    try:
        return Path.home()
    except (RuntimeError, KeyError) as e:
        raise ResolutionError(f"cannot determine home directory: {e}") from e


def resolve_search_paths(settings: Optional[LoaderSettings] = None) -> List[Path]:
    """Directories probed for the config file, highest precedence first"""
    settings = settings or load_settings()
    config_dir = settings.config_dir
    logger.info(f"Config path : {config_dir}")
    return [Path.cwd(), config_dir]


def find_config_file(
    search_paths: Sequence[Path],
    config_name: str = CONFIG_NAME
) -> Path:
    """Return the first existing config file; directory order wins over extension"""
    for directory in search_paths:
        for ext in SUPPORTED_EXTENSIONS:
            candidate = Path(directory) / f"{config_name}.{ext}"
            if candidate.is_file():
                logger.debug(f"Found config file {candidate}")
                return candidate

    raise NotFoundError(config_name, [Path(p) for p in search_paths])


def _lower_keys(data: Any) -> Any:
    """Recursively lower-case mapping keys"""
    if isinstance(data, dict):
        return {str(key).lower(): _lower_keys(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_lower_keys(item) for item in data]
    return data


def read_config_file(path: Path) -> Dict[str, Any]:
    """Parse a config file into a key tree according to its extension"""
    path = Path(path)
    ext = path.suffix.lower().lstrip(".")

    try:
        if ext == "toml":
            with open(path, 'rb') as f:
                data = tomllib.load(f)
        elif ext == "json":
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        elif ext in ("yaml", "yml"):
            with open(path, 'r', encoding='utf-8') as f:
                # BaseLoader keeps scalars as strings so 21:30 or yes are not reinterpreted
                data = yaml.load(f, Loader=yaml.BaseLoader)
        else:
            raise ParseError(path, f"unsupported config format '{ext}'")
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        raise ParseError(path, str(e)) from e
    except OSError as e:
        raise ParseError(path, f"cannot read file: {e}") from e

    # An empty YAML document parses to None
    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ParseError(path, f"top level must be a table of sections, got {type(data).__name__}")

    return _lower_keys(data)


def apply_env_overrides(
    data: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """Overwrite file values with any mapped environment variables that are set"""
    environ = os.environ if environ is None else environ

    for env_var, key_path in ENV_VAR_MAPPING.items():
        value = environ.get(env_var)
        if value is None:
            continue

        keys = key_path.split('.')
        current = data
        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]
            if not isinstance(current, dict):
                logger.warning(f"Cannot apply {env_var}: '{key}' is not a section")
                break
        else:
            current[keys[-1]] = value
            logger.debug(f"Applied environment override {env_var} -> {key_path}")

    return data


def load_config(
    search_paths: Optional[Iterable[Path]] = None,
    exclude: Iterable[str] = (),
    config_name: Optional[str] = None,
    settings: Optional[LoaderSettings] = None
) -> Config:
    """
    Find, parse, map and validate the application config.

    Args:
        search_paths: Directories to probe in order; defaults to the
            current directory followed by ~/.matic-jagar/config
        exclude: Sections or fields to skip during validation
        config_name: Base file name without extension
        settings: Loader settings; read from the environment if omitted

    Returns:
        The validated Config

    Raises:
        ResolutionError, NotFoundError, ParseError, MappingError, ValidationError
    """
    settings = settings or load_settings()
    if search_paths is None:
        paths = resolve_search_paths(settings)
    else:
        paths = [Path(p) for p in search_paths]

    config_file = find_config_file(paths, config_name or settings.config_name)
    logger.info(f"Loading config from {config_file}")

    data = apply_env_overrides(read_config_file(config_file))
    config = Config.from_dict(data, source=config_file)
    config.validate_config(exclude)

    return config


class ConfigLoader:
    """Load the application config once and keep it for the process lifetime"""

    def __init__(
        self,
        settings: Optional[LoaderSettings] = None,
        search_paths: Optional[Iterable[Path]] = None
    ):
        self.settings = settings or load_settings()
        self.search_paths: Optional[List[Path]] = (
            [Path(p) for p in search_paths] if search_paths is not None else None
        )
        self.config: Optional[Config] = None

    def get_search_paths(self) -> List[Path]:
        """Explicit search paths, or the default precedence list"""
        if self.search_paths is not None:
            return list(self.search_paths)
        return resolve_search_paths(self.settings)

    def locate(self) -> Path:
        """Path of the file that load() would read"""
        return find_config_file(self.get_search_paths(), self.settings.config_name)

    def load(self, exclude: Iterable[str] = ()) -> Config:
        """Load on first call; later calls re-validate the cached config"""
        exclude = list(exclude)
        if self.config is None:
            self.config = load_config(
                self.get_search_paths(), exclude, settings=self.settings
            )
        else:
            self.config.validate_config(exclude)
        return self.config

    def clear_cache(self) -> None:
        """Forget the loaded config"""
        self.config = None
