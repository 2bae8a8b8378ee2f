"""Shared constants for portus boards."""

FRONTMATTER_KEY = "kanban-plugin"

VIRTUAL_LISTS = ("archive", "done", "delegated", "recurring", "proposals", "waiting")

DONE_CHAR = "x"

DEFAULT_DATE_TRIGGER = "@"
DEFAULT_TIME_TRIGGER = "@@"
DEFAULT_METADATA_POSITION = "body"
DEFAULT_DATE_FORMAT = "YYYY-MM-DD"
DEFAULT_TIME_FORMAT = "HH:mm"
