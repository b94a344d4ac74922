"""Parsing of composer.json patches and `composer outdated` JSON."""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ComposerError
from .models import PackageRecord


class OutdatedPackage(BaseModel):
    """One entry of the `locked` list in `composer outdated -f json`."""

    model_config = ConfigDict(extra="ignore")

    name: str
    version: str
    latest: str
    latest_status: str = Field(alias="latest-status")
    homepage: str | None = None
    abandoned: bool | str | None = None


class OutdatedReport(BaseModel):
    """Top level of `composer outdated -f json --locked`."""

    model_config = ConfigDict(extra="ignore")

    # Composer omits the key entirely when nothing is outdated.
    locked: list[OutdatedPackage] = []


def parse_outdated(content: str) -> OutdatedReport:
    """Parse `composer outdated` JSON output.

    Args:
        content: Raw stdout of the listing command

    Returns:
        Parsed report

    Raises:
        ComposerError: If the output is not the expected JSON
    """
    if not content.strip():
        return OutdatedReport()
    try:
        return OutdatedReport.model_validate_json(content)
    except ValidationError as e:
        raise ComposerError(f"Unexpected composer outdated output: {e}", content) from e


def _descriptor(entry) -> str | None:
    """Extract a patch descriptor from a single patch definition."""
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        # composer-patches 2.x object form
        for key in ("url", "description"):
            if isinstance(entry.get(key), str):
                return entry[key]
    return None


class PatchIndex:
    """Patch descriptors per package, read from the project manifest."""

    def __init__(self, patches: dict[str, tuple[str, ...]] | None = None):
        self._patches = patches or {}

    def for_package(self, name: str) -> tuple[str, ...]:
        return self._patches.get(name, ())

    @classmethod
    def from_mapping(cls, raw: dict) -> "PatchIndex":
        """Build from a `{package: patches}` mapping.

        Patches may be a list of descriptors or a `{description: url}`
        mapping, in which case the applied urls are the descriptors.
        """
        patches: dict[str, tuple[str, ...]] = {}
        for package, definitions in raw.items():
            if isinstance(definitions, dict):
                entries = list(definitions.values())
            elif isinstance(definitions, list):
                entries = definitions
            else:
                continue
            descriptors = tuple(d for d in map(_descriptor, entries) if d)
            if descriptors:
                patches[package] = descriptors
        return cls(patches)


def load_patches(composer_json: Path) -> PatchIndex:
    """Read patch definitions from composer.json.

    Honors `extra.patches-file`, resolved relative to the manifest.

    Raises:
        ComposerError: If a manifest or patches file is not valid JSON
    """
    manifest = _load_json(composer_json)
    extra = manifest.get("extra")
    if not isinstance(extra, dict):
        return PatchIndex()

    patches_file = extra.get("patches-file")
    if patches_file:
        patches = _load_json(composer_json.parent / patches_file).get("patches") or {}
    else:
        patches = extra.get("patches") or {}

    if not isinstance(patches, dict):
        return PatchIndex()
    return PatchIndex.from_mapping(patches)


def _load_json(path: Path) -> dict:
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ComposerError(f"Cannot read {path}: {e}") from e
    return data if isinstance(data, dict) else {}


def to_record(package: OutdatedPackage, patches: PatchIndex) -> PackageRecord:
    """Combine a listing entry with its known patches."""
    return PackageRecord(
        name=package.name,
        current_version=package.version,
        latest_version=package.latest,
        update_status=package.latest_status,
        homepage=package.homepage or None,
        abandoned=package.abandoned,
        patches=patches.for_package(package.name),
    )
