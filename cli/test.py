from cli._runner import run


def main() -> None:
    """Run unit tests."""
    import sys

    sys.exit(run(["uv", "run", "pytest", "tests/unit"]))


def test_v() -> None:
    """Run tests with verbose output."""
    import sys

    sys.exit(run(["uv", "run", "pytest", "-v", "tests/unit"]))
