"""Toolchain specs, bot command parsing, agent tracking and GitHub helpers for an experiment server."""

__version__ = "0.1.0"