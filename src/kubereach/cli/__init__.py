"""Command line interface."""

from kubereach.cli.main import cli

__all__ = ["cli"]
