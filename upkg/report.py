"""
report.py — Terminal report renderer.

Turns a StatusRecord into text. Three views are available:

    status  — framed block with a fixed-width glyph bar (default)
    plain   — dashed header + "Label: value" lines, no framing
    json    — machine-readable dict, one document per run

All renderers return a list of lines; `print_report` writes them out.
Rendering has no side effects, so the same record always yields the same text.
"""

import json
import logging
import sys
from typing import Any, Callable, Optional, TextIO

from upkg.config import StatusConfig
from upkg.metrics import StatusRecord

logger = logging.getLogger(__name__)

RULE = "─"
TITLE_RULE_WIDTH = 9
CLOSING_RULE_WIDTH = 39


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def _plural(value: int, unit: str) -> str:
    return f"{value} {unit}{'' if value == 1 else 's'}"


def normalize_duration(seconds: int) -> str:
    """Format an elapsed number of seconds for humans.

    Args:
        seconds: Elapsed seconds (negative values get a leading '-').

    Returns:
        e.g. '45 seconds', '1 minute', '3 hours', '10 days 1 hour'.
    """
    if seconds < 0:
        return "-" + normalize_duration(-seconds)
    if seconds < 60:
        return _plural(seconds, "second")
    if seconds < 3600:
        return _plural(seconds // 60, "minute")
    if seconds < 86400:
        return _plural(seconds // 3600, "hour")
    days, rest = divmod(seconds, 86400)
    return f"{_plural(days, 'day')} {_plural(rest // 3600, 'hour')}"


def render_bar(
    count: int,
    width: int = 20,
    filled_glyph: str = "█",
    empty_glyph: str = "░",
) -> str:
    """Render a bracketed glyph bar for a bounded count.

    Args:
        count: Number of filled cells wanted; values above `width` are clipped.
        width: Total number of cells between the brackets.
        filled_glyph: Character for filled cells.
        empty_glyph: Character for empty cells.

    Returns:
        e.g. '[█████░░░░░░░░░░░░░░░]' for count=5, width=20.
    """
    filled = max(0, min(count, width))
    if count > width:
        logger.debug("Bar count %d exceeds width %d; clipping", count, width)
    return f"[{filled_glyph * filled}{empty_glyph * (width - filled)}]"


def title_rule(title: str) -> str:
    """Separator line framing the report title."""
    edge = RULE * TITLE_RULE_WIDTH
    return f"{edge} {title} {edge}"


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------

def render(record: StatusRecord, cfg: Optional[StatusConfig] = None) -> list[str]:
    """Render the framed status block.

    Args:
        record: Status to display.
        cfg: Display settings (title, bar width, glyphs).

    Returns:
        Six lines: title rule, three counters, bar, closing rule.
    """
    cfg = cfg or StatusConfig()
    bar = render_bar(
        record.pending_updates, cfg.bar_width, cfg.filled_glyph, cfg.empty_glyph,
    )
    return [
        title_rule(cfg.title),
        f"Days Since Last Update: {record.days_since_update}",
        f"Total Packages Installed: {record.total_packages_installed}",
        f"Pending Updates: {record.pending_updates}",
        f"Updates available      : {bar}",
        RULE * CLOSING_RULE_WIDTH,
    ]


STAT_LABELS = {
    "installed": "Installed",
    "upgradable": "Upgradable",
    "last_update": "Last System Update",
    "days_since_update": "Days Since Last Update",
}


def format_stat(stat: str, record: StatusRecord) -> str:
    """Format the value of one stat id for the plain view."""
    if stat == "installed":
        return str(record.total_packages_installed)
    if stat == "upgradable":
        return str(record.pending_updates)
    if stat == "last_update":
        return normalize_duration(record.seconds_since_update)
    if stat == "days_since_update":
        return str(record.days_since_update)
    raise ValueError(f"unknown stat '{stat}'")


def render_plain(record: StatusRecord, cfg: Optional[StatusConfig] = None) -> list[str]:
    """Render the unframed text view: header, then 'Label: value' per configured stat."""
    cfg = cfg or StatusConfig()
    lines = ["----- upkg -----"]
    for stat in cfg.stats:
        lines.append(f"{STAT_LABELS[stat]}: {format_stat(stat, record)}")
    return lines


def report_dict(record: StatusRecord, cfg: Optional[StatusConfig] = None) -> dict[str, Any]:
    """Generate a dictionary report suitable for JSON serialization.

    Args:
        record: Status to export.
        cfg: Display settings used for the bar.

    Returns:
        Dict with counters, timestamps and the rendered bar.
    """
    cfg = cfg or StatusConfig()
    return {
        "days_since_update": record.days_since_update,
        "total_packages_installed": record.total_packages_installed,
        "pending_updates": record.pending_updates,
        "seconds_since_update": record.seconds_since_update,
        "last_update": record.last_update.isoformat(),
        "generated_at": record.generated_at.isoformat(),
        "bar": render_bar(
            record.pending_updates, cfg.bar_width, cfg.filled_glyph, cfg.empty_glyph,
        ),
    }


def render_json(record: StatusRecord, cfg: Optional[StatusConfig] = None) -> list[str]:
    """Render `report_dict` as an indented JSON document."""
    return json.dumps(report_dict(record, cfg), indent=2, ensure_ascii=False).splitlines()


RENDERERS: dict[str, Callable[[StatusRecord, Optional[StatusConfig]], list[str]]] = {
    "status": render,
    "plain": render_plain,
    "json": render_json,
}


def print_report(
    record: StatusRecord,
    cfg: Optional[StatusConfig] = None,
    fmt: str = "status",
    stream: Optional[TextIO] = None,
) -> None:
    """Write a rendered report to a text stream.

    Args:
        record: Status to display.
        cfg: Display settings.
        fmt: One of RENDERERS' keys.
        stream: Output stream, stdout by default.

    Raises:
        ValueError: If `fmt` is not a known format.
    """
    try:
        renderer = RENDERERS[fmt]
    except KeyError:
        raise ValueError(f"unknown report format '{fmt}'") from None

    out = stream if stream is not None else sys.stdout
    for line in renderer(record, cfg):
        out.write(line + "\n")
    out.flush()
