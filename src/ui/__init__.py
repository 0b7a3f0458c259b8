"""
Rich console interface for the greetings app.
"""

from .app import build_controller, run_app, run_command

__all__ = [
    "build_controller",
    "run_app",
    "run_command",
]
