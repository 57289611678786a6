"""Markdown export of the snapshot store."""

from __future__ import annotations

from datetime import datetime

from mindmark.snapshots.models import Snapshot

_TIME_FORMAT = "%Y-%m-%d %H:%M"


def _local(ts: datetime) -> str:
    return ts.astimezone().strftime(_TIME_FORMAT)


def _render_snapshot(snapshot: Snapshot) -> list[str]:
    summary_lines = [f"- {line.replace(chr(10), ' ')}" for line in snapshot.summary]
    tags = ", ".join(f"`{t}`" for t in snapshot.tags)

    return [
        f"## {snapshot.title}",
        "",
        f"**URL:** {snapshot.url}",
        f"**Intent:** {snapshot.intent or 'N/A'}",
        f"**Tags:** {tags or 'N/A'}",
        f"**Next Action:** {snapshot.next_action or 'N/A'}",
        f"**Saved:** {_local(snapshot.created_at)}",
        "",
        "**Summary:**",
        *(summary_lines or ["- (No summary)"]),
        "",
        "---",
        "",
    ]


def render_markdown(snapshots: list[Snapshot], generated_at: datetime) -> str:
    """Render snapshots as a single markdown document.

    The first line carries the snapshot count, followed by the generation
    time and one section per snapshot in store order.
    """
    lines: list[str] = [
        f"# MindMark Export ({len(snapshots)} snapshots)",
        f"**Generated:** {_local(generated_at)}",
        f"**Total Snapshots:** {len(snapshots)}",
        "",
        "---",
        "",
    ]
    for snapshot in snapshots:
        lines.extend(_render_snapshot(snapshot))
    return "\n".join(lines)
