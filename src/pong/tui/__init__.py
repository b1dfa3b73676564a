"""Textual front-end for the pong dashboard."""

from .app import PongApp, run_tui

__all__ = ["PongApp", "run_tui"]
