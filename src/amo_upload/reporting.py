"""Table rendering for the version list."""

from typing import Optional

from rich.console import Console
from rich.table import Table

from .models.version import Channel, FileStatus, Version, VersionListPage

STATUS_GLYPHS = {
    FileStatus.PUBLIC: "✅",
    FileStatus.DISABLED: "🚫",
    FileStatus.UNREVIEWED: "❔",
}

COLUMNS = ("Channel", "Version", "Status", "Review", "Source", "Compatibility")


def version_row(version: Version) -> dict[str, str]:
    """Render one version as table cells."""
    status = version.file.status if version.file else None
    if version.channel is Channel.LISTED:
        review = ""
    else:
        review = "✅" if status is FileStatus.PUBLIC else "👀"
    return {
        "Channel": version.channel.value,
        "Version": version.version,
        "Status": STATUS_GLYPHS.get(status, "") if status else "",
        "Review": review,
        "Source": "📎" if version.source_present else "",
        "Compatibility": "|".join(version.compatibility),
    }


def listing_summary(page: VersionListPage, page_number: int, page_size: int) -> str:
    start = (page_number - 1) * page_size + 1
    end = start + len(page.items) - 1
    return f"Listing {start}-{end}/{page.total_count}"


def print_versions(
    page: VersionListPage,
    page_number: int,
    page_size: int,
    console: Optional[Console] = None,
) -> None:
    """Print a page of versions with a summary line."""
    console = console or Console()
    console.print(listing_summary(page, page_number, page_size))

    table = Table(show_header=True)
    for column in COLUMNS:
        table.add_column(column)
    for version in page.items:
        row = version_row(version)
        table.add_row(*(row[column] for column in COLUMNS))
    console.print(table)
