import sys
from pathlib import Path


def example_path(name):
    output_folder = Path("tmp/examples/")
    output_folder.mkdir(parents=True, exist_ok=True)
    return output_folder.joinpath(name)


def int_arg(index: int, default: int) -> int:
    """Positional integer from the command line or the provided default"""
    return default if len(sys.argv) <= index else int(sys.argv[index])
