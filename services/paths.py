"""Canonical path constants for runtime data."""
from pathlib import Path
from typing import Union

APP_ROOT = Path(__file__).parent.parent

# Runtime data (gitignored)
RUNTIME_DIR = APP_ROOT / "runtime"
STORE_DIR = RUNTIME_DIR / "store"


def resolve_data_dir(value: Union[str, Path, None]) -> Path:
    """Resolve a configured data dir; relative paths hang off the project root."""
    if not value:
        return STORE_DIR
    path = Path(value).expanduser()
    return path if path.is_absolute() else APP_ROOT / path
