"""Core data models for drupdate."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

DEV_PREFIX = "dev-"


class UpdateType(str, Enum):
    """Scope of updates to apply."""

    SEMVER_SAFE = "semver-safe-update"
    ALL = "all"


@dataclass(frozen=True)
class RunConfig:
    """Resolved configuration for a single run."""

    update_type: UpdateType = UpdateType.SEMVER_SAFE
    update_core: bool = True
    exclude: frozenset[str] = frozenset()
    output_file: Path | None = None
    command_prefix: str | None = None
    github_actions: bool = False


@dataclass(frozen=True)
class PackageRecord:
    """A single outdated package as reported by Composer."""

    name: str
    current_version: str
    latest_version: str
    update_status: str  # up-to-date, semver-safe-update, update-possible
    homepage: str | None = None
    abandoned: bool | str | None = None
    patches: tuple[str, ...] = ()

    @property
    def patch_count(self) -> int:
        return len(self.patches)

    @property
    def is_dev_target(self) -> bool:
        return self.latest_version.startswith(DEV_PREFIX)


class OutcomeKind(Enum):
    """Fixed outcome labels for a package update."""

    SUCCESS = "success"
    PATCH_FAILURE = "patch failure"
    GENERIC_ERROR = "generic error"
    DEPENDENCY_ERROR = "failed dependency"
    UNKNOWN = "unknown"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class UpdateOutcome:
    """Result of processing one package.

    Only patch failures carry a detail: the descriptor of the patch that
    Composer failed to apply.
    """

    kind: OutcomeKind
    detail: str | None = None

    @classmethod
    def patch_failure(cls, detail: str) -> "UpdateOutcome":
        return cls(OutcomeKind.PATCH_FAILURE, detail)

    @property
    def label(self) -> str:
        return self.kind.value


SUCCESS = UpdateOutcome(OutcomeKind.SUCCESS)
GENERIC_ERROR = UpdateOutcome(OutcomeKind.GENERIC_ERROR)
DEPENDENCY_ERROR = UpdateOutcome(OutcomeKind.DEPENDENCY_ERROR)
UNKNOWN = UpdateOutcome(OutcomeKind.UNKNOWN)
SKIPPED = UpdateOutcome(OutcomeKind.SKIPPED)


@dataclass(frozen=True)
class ReportRow:
    """One line of the summary table."""

    package: PackageRecord
    outcome: UpdateOutcome


@dataclass
class SummaryReport:
    """Rows and highlight notes accumulated over a run."""

    rows: list[ReportRow] = field(default_factory=list)
    highlights: list[str] = field(default_factory=list)

    def add_row(self, package: PackageRecord, outcome: UpdateOutcome) -> None:
        self.rows.append(ReportRow(package=package, outcome=outcome))

    def add_highlight(self, note: str) -> None:
        self.highlights.append(note)
