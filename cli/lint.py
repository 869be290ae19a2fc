from cli._runner import run

_PATHS = ["app", "cli", "scripts", "tests"]


def main() -> None:
    """Run linting and the formatting check."""
    import sys

    code = run(["uv", "run", "ruff", "check", *_PATHS])
    sys.exit(code or run(["uv", "run", "ruff", "format", "--check", *_PATHS]))


def format() -> None:
    """Run code formatting."""
    import sys

    sys.exit(run(["uv", "run", "ruff", "format", *_PATHS]))
