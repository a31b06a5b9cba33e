"""taskden: tasks, areas and notes kept in a local SQLite database."""

__version__ = "0.1.0"
