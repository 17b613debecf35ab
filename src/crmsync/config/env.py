"""Environment loading for configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dotenv import load_dotenv

if TYPE_CHECKING:
    from pathlib import Path


def load_environment(dotenv_path: Path | None = None, *, override: bool = False) -> bool:
    """Load a ``.env`` file into the process environment.

    Values already present in the environment win unless ``override`` is set. Returns
    whether a file was found and read.
    """

    return load_dotenv(dotenv_path=dotenv_path, override=override)
