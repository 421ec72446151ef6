"""Cross-platform path management for nutrimind.

Every persistent file location is defined here so the client, the CLI
and the tests patch a single canonical set of paths.  Directories are
created lazily by the helpers, never at import time.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

from platformdirs import user_config_dir

APP_NAME = "nutrimind"

CONFIG_DIR: Path = Path(user_config_dir(APP_NAME))

TOKENS_FILE = CONFIG_DIR / "tokens.json"
SETTINGS_FILE = CONFIG_DIR / "settings.json"


def ensure_parents(path: Path) -> Path:
    """Create all parent directories for *path* if they do not exist.

    Returns *path* unchanged so the call can be used inline.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass
    return path


def atomic_write(path: Path, data: Union[str, bytes], text_mode: bool = True) -> None:
    """Write *data* to *path* atomically (write-to-tmp then replace).

    Mismatched *data* types are encoded or decoded to suit *text_mode*.
    The temporary file is removed if the replace fails.
    """
    tmp = path.with_suffix(path.suffix + ".tmp")
    ensure_parents(tmp)

    if text_mode:
        tmp.write_text(data.decode() if isinstance(data, bytes) else data, encoding="utf-8")
    else:
        tmp.write_bytes(data.encode() if isinstance(data, str) else data)

    try:
        os.replace(tmp, path)
    except OSError:
        try:
            if tmp.exists():
                tmp.unlink()
        except OSError:
            pass
        raise
