"""
Configuration loading.

Settings come from ``arklens.toml`` or from the ``[tool.arklens]`` table of a
``pyproject.toml``. Every setting has a default, so an empty or missing file
gives a working configuration.

Example ``arklens.toml``:

    [catalog]
    extra_builtin_types = ["bigint"]
    extra_subtypes = ["email", "uuid"]

    [catalog.hierarchy]
    string = ["email", "uuid"]

    [injection]
    definition_functions = "(type|scope|define|schema)"

    [resolver]
    max_search_depth = 6

    [logging]
    level = "DEBUG"
"""

import logging
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from arklens.core.catalog import DEFAULT_CATALOG, TypeCatalog
from arklens.core.errors import make_config_error
from arklens.core.scanning import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "arklens.toml"

DEFAULT_DEFINITION_FUNCTIONS = r"(type|generic|scope|define|match|fn|module|[aA]rk[a-zA-Z]*)"
DEFAULT_CHAINED_METHODS = (
    r"(and|or|case|in|extends|ifExtends|intersect|merge|exclude|extract|overlaps|subsumes|to|satisfies)"
)


@dataclass
class CatalogConfig:
    """Additions to the built-in keyword catalog."""

    extra_builtin_types: list[str] = field(default_factory=list)
    extra_utility_keywords: list[str] = field(default_factory=list)
    extra_subtypes: list[str] = field(default_factory=list)
    hierarchy: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class InjectionConfig:
    """Which host calls hold ArkType expressions."""

    definition_functions: str = DEFAULT_DEFINITION_FUNCTIONS
    chained_methods: str = DEFAULT_CHAINED_METHODS


@dataclass
class ResolverConfig:
    max_search_depth: int = DEFAULT_MAX_DEPTH


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class ArklensConfig:
    """Complete arklens configuration."""

    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    injection: InjectionConfig = field(default_factory=InjectionConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source: Path | None = None

    def build_catalog(self) -> TypeCatalog:
        """The default catalog extended with this configuration's additions."""
        extra = self.catalog
        if not (
            extra.extra_builtin_types
            or extra.extra_utility_keywords
            or extra.extra_subtypes
            or extra.hierarchy
        ):
            return DEFAULT_CATALOG
        return DEFAULT_CATALOG.extended(
            builtin_types=extra.extra_builtin_types,
            utility_keywords=extra.extra_utility_keywords,
            subtypes=extra.extra_subtypes,
            hierarchy=extra.hierarchy,
        )


def _table(data: dict[str, Any], key: str, path: Path | None) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise make_config_error(f"'{key}' must be a table", path)
    return value


def _string_list(data: dict[str, Any], key: str, path: Path | None) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise make_config_error(f"'{key}' must be a list of strings", path)
    return value


def _pattern(data: dict[str, Any], key: str, default: str, path: Path | None) -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise make_config_error(f"'{key}' must be a regular expression string", path)
    try:
        re.compile(value)
    except re.error as e:
        raise make_config_error(f"'{key}' is not a valid regular expression: {e}", path) from e
    return value


def parse_config(data: dict[str, Any], path: Path | None = None) -> ArklensConfig:
    """
    Build an ArklensConfig from parsed TOML data.

    Raises:
        ConfigError: If a setting has the wrong type
    """
    catalog_data = _table(data, "catalog", path)
    injection_data = _table(data, "injection", path)
    resolver_data = _table(data, "resolver", path)
    logging_data = _table(data, "logging", path)

    hierarchy_data = catalog_data.get("hierarchy", {})
    if not isinstance(hierarchy_data, dict):
        raise make_config_error("'catalog.hierarchy' must be a table", path)
    hierarchy = {parent: _string_list(hierarchy_data, parent, path) for parent in hierarchy_data}

    catalog_config = CatalogConfig(
        extra_builtin_types=_string_list(catalog_data, "extra_builtin_types", path),
        extra_utility_keywords=_string_list(catalog_data, "extra_utility_keywords", path),
        extra_subtypes=_string_list(catalog_data, "extra_subtypes", path),
        hierarchy=hierarchy,
    )

    injection_config = InjectionConfig(
        definition_functions=_pattern(
            injection_data, "definition_functions", DEFAULT_DEFINITION_FUNCTIONS, path
        ),
        chained_methods=_pattern(injection_data, "chained_methods", DEFAULT_CHAINED_METHODS, path),
    )

    depth = resolver_data.get("max_search_depth", DEFAULT_MAX_DEPTH)
    if not isinstance(depth, int) or isinstance(depth, bool) or depth < 1:
        raise make_config_error("'resolver.max_search_depth' must be a positive integer", path)

    level = logging_data.get("level", "INFO")
    if not isinstance(level, str) or level.upper() not in logging.getLevelNamesMapping():
        raise make_config_error(f"'logging.level' is not a logging level: {level!r}", path)

    return ArklensConfig(
        catalog=catalog_config,
        injection=injection_config,
        resolver=ResolverConfig(max_search_depth=depth),
        logging=LoggingConfig(level=level.upper()),
        source=path,
    )


def load_config(path: Path) -> ArklensConfig:
    """
    Load configuration from ``arklens.toml`` or ``pyproject.toml``.

    Raises:
        ConfigError: If the file is unreadable, not TOML, or invalid
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise make_config_error(f"Cannot read config: {e}", path) from e
    except tomllib.TOMLDecodeError as e:
        raise make_config_error(f"Invalid TOML: {e}", path) from e

    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("arklens", {})
    return parse_config(data, path)


def discover_config(root: Path) -> ArklensConfig:
    """
    Find and load the configuration for a workspace root.

    ``arklens.toml`` wins over ``pyproject.toml``; with neither present the
    defaults are returned.
    """
    candidate = root / CONFIG_FILENAME
    if candidate.exists():
        logger.info(f"Using config {candidate}")
        return load_config(candidate)
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        config = load_config(pyproject)
        if config != ArklensConfig(source=pyproject):
            logger.info(f"Using [tool.arklens] from {pyproject}")
        return config
    return ArklensConfig()
