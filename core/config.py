"""Run configuration from CLI flags and GitHub Actions inputs."""

import logging
from collections.abc import Mapping
from pathlib import Path

from .errors import ConfigValidationError
from .models import RunConfig, UpdateType

logger = logging.getLogger(__name__)

# Inputs set by action.yml when running as a GitHub Action.
INPUT_UPDATE_TYPE = "INPUT_UPDATE_TYPE"
INPUT_UPDATE_CORE = "INPUT_UPDATE_CORE"
INPUT_UPDATE_EXCLUDE = "INPUT_UPDATE_EXCLUDE"
INPUT_COMPOSER_PREFIX = "INPUT_COMPOSER_PREFIX"


def running_in_github_actions(environ: Mapping[str, str]) -> bool:
    """Check whether we run under a GitHub Actions runner."""
    return environ.get("GITHUB_ACTIONS", "").lower() == "true"


def parse_update_type(value: str) -> UpdateType:
    try:
        return UpdateType(value)
    except ValueError:
        raise ConfigValidationError(
            "Update type can be either semver-safe-update or all"
        ) from None


def parse_update_core(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ConfigValidationError("Core flag must be either true or false")


def parse_exclude(value: str) -> frozenset[str]:
    """Split a comma-separated exclude list: token,redirect,pathauto"""
    return frozenset(item.strip() for item in value.split(",") if item.strip())


def parse_output_file(value: str) -> Path:
    if not value.endswith(".md"):
        raise ConfigValidationError(
            "Summary output file needs to end with .md extension."
        )
    return Path(value)


def _pick(flag: str | None, environ: Mapping[str, str], key: str, use_env: bool) -> str | None:
    """Return the winning raw value for one field: flag, then CI input."""
    if flag is not None:
        return flag
    if use_env:
        value = environ.get(key, "")
        if value.strip():
            return value
    return None


def resolve_config(
    environ: Mapping[str, str],
    update_type: str | None = None,
    update_core: str | None = None,
    exclude: str | None = None,
    output: str | None = None,
    prefix: str | None = None,
) -> RunConfig:
    """Build the run configuration.

    Each field is taken from exactly one source. An explicit CLI flag wins;
    otherwise, when running under GitHub Actions, the matching non-empty
    action input is used; otherwise the default applies.

    Args:
        environ: Process environment
        update_type: Value of --type, if given
        update_core: Value of --core, if given
        exclude: Value of --exclude, if given
        output: Value of --output, if given
        prefix: Value of --prefix, if given

    Returns:
        Validated RunConfig

    Raises:
        ConfigValidationError: If any value is invalid
    """
    github = running_in_github_actions(environ)

    raw_type = _pick(update_type, environ, INPUT_UPDATE_TYPE, github)
    raw_core = _pick(update_core, environ, INPUT_UPDATE_CORE, github)
    raw_exclude = _pick(exclude, environ, INPUT_UPDATE_EXCLUDE, github)
    raw_prefix = _pick(prefix, environ, INPUT_COMPOSER_PREFIX, github)

    config = RunConfig(
        update_type=parse_update_type(raw_type) if raw_type else UpdateType.SEMVER_SAFE,
        update_core=parse_update_core(raw_core) if raw_core else True,
        exclude=parse_exclude(raw_exclude) if raw_exclude else frozenset(),
        output_file=parse_output_file(output) if output else None,
        command_prefix=raw_prefix.strip() if raw_prefix and raw_prefix.strip() else None,
        github_actions=github,
    )
    logger.debug("Resolved configuration: %s", config)
    return config
