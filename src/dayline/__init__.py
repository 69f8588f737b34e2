"""dayline: a priority-ordered personal task list laid out on a 24-hour timeline."""

__version__ = "0.1.0"
