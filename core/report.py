"""Markdown summary rendering and output sinks."""

import logging
import uuid
from pathlib import Path

from .models import PackageRecord, ReportRow, SummaryReport

logger = logging.getLogger(__name__)

HEADING = "### Automated Drupal update summary"
TABLE_HEADER = (
    "| Project name | Old version | Proposed version | Status | Patches | Abandoned |\n"
    "| ------ | ------ | ------ | ------ | ------ | ------ |"
)
FALLBACK_URL = "https://www.drupal.org/project/drupal"
ENV_VARIABLE = "DRUPAL_UPDATES_TABLE"


def _cell(value: str) -> str:
    return value.replace("|", "\\|")


def project_url(package: PackageRecord) -> str:
    return package.homepage or FALLBACK_URL


def release_url(package: PackageRecord) -> str:
    """Release page for the target version; dev targets have none."""
    url = project_url(package)
    if package.is_dev_target:
        return url
    return f"{url}/releases/{package.latest_version}"


def format_abandoned(abandoned: bool | str | None) -> str:
    if isinstance(abandoned, str) and abandoned:
        return f"Yes (use {abandoned})"
    return "Yes" if abandoned else "No"


def format_row(row: ReportRow) -> str:
    package = row.package
    cells = [
        f"[{_cell(package.name)}]({project_url(package)})",
        _cell(package.current_version),
        f"[{_cell(package.latest_version)}]({release_url(package)})",
        row.outcome.label,
        str(package.patch_count),
        _cell(format_abandoned(package.abandoned)),
    ]
    return "| " + " | ".join(cells) + " |"


def render_summary(report: SummaryReport) -> str:
    """Render the summary as a Markdown document.

    Args:
        report: Accumulated report

    Returns:
        Heading, highlight bullets and the update table
    """
    lines = [HEADING]
    lines.extend(f"- {note}" for note in report.highlights)
    lines.append("")
    lines.append(TABLE_HEADER)
    lines.extend(format_row(row) for row in report.rows)
    return "\n".join(lines) + "\n"


def write_summary_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    logger.info("Wrote summary to %s", path)


def publish_to_github(content: str, step_summary: Path | None, github_env: Path | None) -> None:
    """Append the summary to the step summary and export it for later steps.

    Args:
        content: Rendered summary
        step_summary: Path from GITHUB_STEP_SUMMARY
        github_env: Path from GITHUB_ENV
    """
    if step_summary:
        with step_summary.open("a") as handle:
            handle.write(content)
    else:
        logger.warning("GITHUB_STEP_SUMMARY is not set, skipping step summary")

    if github_env:
        delimiter = f"EOF_{uuid.uuid4().hex}"
        with github_env.open("a") as handle:
            handle.write(f"{ENV_VARIABLE}<<{delimiter}\n{content}")
            if not content.endswith("\n"):
                handle.write("\n")
            handle.write(f"{delimiter}\n")
    else:
        logger.warning("GITHUB_ENV is not set, %s not exported", ENV_VARIABLE)
