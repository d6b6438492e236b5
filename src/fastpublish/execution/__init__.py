"""External command execution."""

from fastpublish.execution.runner import run_command, strip_ansi

__all__ = ["run_command", "strip_ansi"]
