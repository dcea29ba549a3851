"""
CLI Module - Command-line interface for claimbench.
===================================================

Usage:
    claimbench --help
    claimbench eval --pipeline my_rag.pipeline:Pipeline --ground-truth qa.json
    claimbench info

Components:
- main: Typer CLI application
"""

from claimbench.cli.main import app, cli

__all__ = ["app", "cli"]
