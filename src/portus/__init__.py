"""Markdown-backed kanban board with a bidirectional text sync engine."""

__version__ = "0.1.0"
