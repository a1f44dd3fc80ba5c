"""Allow ``python -m ytsig`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m ytsig`` behaves identically to the ``ytsig`` console
script.
"""

from __future__ import annotations

from ytsig.cli.app import cli

if __name__ == "__main__":
    cli()
