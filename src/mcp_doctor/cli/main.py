"""Console script entry point for ``mcp-doctor``."""

from __future__ import annotations

from mcp_doctor.cli.app import main as _app_main


def main(argv: list[str] | None = None) -> None:
    """Invoke the Typer application.

    Parameters
    ----------
    argv:
        Optional list of arguments to pass to Typer. When ``None`` the
        process arguments are used.
    """

    _app_main(argv)


__all__ = ["main"]
