"""
Text rendering of journal entries for the terminal.

Three view modes:
- list:     one block per entry
- grid:     two entries side by side per row
- calendar: entries grouped under the day they were written

Rendering only reads entries; order is whatever the caller passes in
(normally ``EntryStore.list``).
"""

import textwrap
from itertools import groupby, zip_longest
from typing import List, Sequence

from app.features.journaling.models import JournalEntry
from app.shared.constants import VIEW_MODES

SHORT_ID_LENGTH = 8

LIGHT_THEME = {"pin": "\033[33m", "muted": "\033[90m", "tag": "\033[34m", "reset": "\033[0m"}
DARK_THEME = {"pin": "\033[93m", "muted": "\033[37m", "tag": "\033[96m", "reset": "\033[0m"}
PLAIN_THEME = {"pin": "", "muted": "", "tag": "", "reset": ""}


def pick_theme(dark_mode: bool, color: bool = True) -> dict:
    if not color:
        return PLAIN_THEME
    return DARK_THEME if dark_mode else LIGHT_THEME


def short_id(entry: JournalEntry) -> str:
    return entry.id[:SHORT_ID_LENGTH]


def format_timestamp(entry: JournalEntry) -> str:
    return entry.created_at.astimezone().strftime("%Y-%m-%d %H:%M")


def entry_lines(entry: JournalEntry, width: int, theme: dict = PLAIN_THEME) -> List[str]:
    """Lines for one entry, each at most ``width`` visible characters."""
    header = f"{format_timestamp(entry)}  [{short_id(entry)}]"
    if entry.is_pinned:
        header = f"{theme['pin']}* {header}{theme['reset']}"
    else:
        header = f"{theme['muted']}{header}{theme['reset']}"

    lines = [header]
    if entry.tags:
        tags = " ".join(f"#{tag}" for tag in entry.tags)
        lines.extend(f"{theme['tag']}{line}{theme['reset']}" for line in textwrap.wrap(tags, width))

    for paragraph in entry.prompt.splitlines() or [""]:
        lines.extend(textwrap.wrap(paragraph, width) or [""])
    for paragraph in entry.response.splitlines() or [""]:
        lines.extend(textwrap.wrap(paragraph, width, initial_indent="> ", subsequent_indent="  ") or [">"])
    return lines


def render_list(entries: Sequence[JournalEntry], width: int = 80, theme: dict = PLAIN_THEME) -> str:
    blocks = ["\n".join(entry_lines(entry, width, theme)) for entry in entries]
    return "\n\n".join(blocks)


def _visible_len(line: str) -> int:
    for code in set(LIGHT_THEME.values()) | set(DARK_THEME.values()):
        line = line.replace(code, "")
    return len(line)


def render_grid(entries: Sequence[JournalEntry], width: int = 80, theme: dict = PLAIN_THEME) -> str:
    gutter = 4
    column_width = max(20, (width - gutter) // 2)
    rows = []
    for i in range(0, len(entries), 2):
        left = entry_lines(entries[i], column_width, theme)
        right = entry_lines(entries[i + 1], column_width, theme) if i + 1 < len(entries) else []
        row = []
        for left_line, right_line in zip_longest(left, right, fillvalue=""):
            padding = " " * (column_width - _visible_len(left_line) + gutter)
            row.append(f"{left_line}{padding}{right_line}".rstrip())
        rows.append("\n".join(row))
    return "\n\n".join(rows)


def render_calendar(entries: Sequence[JournalEntry], width: int = 80, theme: dict = PLAIN_THEME) -> str:
    # Calendar order is by day regardless of pin state
    ordered = sorted(entries, key=lambda entry: entry.created_at, reverse=True)
    sections = []
    for day, day_entries in groupby(ordered, key=lambda entry: entry.created_at.astimezone().date()):
        heading = day.strftime("%A, %B %d, %Y")
        blocks = [heading, "=" * len(heading)]
        for entry in day_entries:
            blocks.append("\n".join(entry_lines(entry, width, theme)))
        sections.append("\n\n".join(blocks))
    return "\n\n".join(sections)


RENDERERS = {
    "list": render_list,
    "grid": render_grid,
    "calendar": render_calendar,
}


def render(
    entries: Sequence[JournalEntry],
    mode: str = "list",
    width: int = 80,
    dark_mode: bool = False,
    color: bool = False,
) -> str:
    """Render entries in the given view mode."""
    if mode not in VIEW_MODES:
        raise ValueError(f"Unknown view mode: {mode}")
    if not entries:
        return "No entries."
    return RENDERERS[mode](list(entries), width=width, theme=pick_theme(dark_mode, color))
