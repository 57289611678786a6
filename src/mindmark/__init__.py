"""MindMark: capture pages as summarized, intent-tagged snapshots."""

__version__ = "0.3.0"
