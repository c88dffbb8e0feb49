"""sprintboard - project board reconciliation and AI-chat directive execution."""

__version__ = "0.1.0"
