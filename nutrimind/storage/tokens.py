"""The saved credential pair.

The file holds a long-lived refresh token, so it is written owner-only
(``0600``) and validated as a :class:`Credential` on the way back in.  A
file that fails validation is treated as "not logged in" rather than as
an error: the user can always log in again.
"""

from __future__ import annotations

import os
import stat

from loguru import logger
from pydantic import ValidationError

from ..models.auth import Credential
from .paths import TOKENS_FILE, atomic_write

OWNER_ONLY = stat.S_IRUSR | stat.S_IWUSR


def load_tokens() -> Credential | None:
    """Return the saved credential, or ``None`` if there is no usable one."""
    try:
        raw = TOKENS_FILE.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        logger.warning(f"Cannot read {TOKENS_FILE}: {exc}")
        return None

    try:
        credential = Credential.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning(f"Ignoring invalid credential file {TOKENS_FILE}: {exc.error_count()} error(s)")
        return None
    if not credential.access_token:
        logger.warning(f"Ignoring credential file {TOKENS_FILE} without an access token")
        return None
    return credential


def save_tokens(credential: Credential) -> None:
    """Write *credential* atomically and restrict the file to its owner."""
    atomic_write(TOKENS_FILE, credential.model_dump_json(indent=2))
    try:
        os.chmod(TOKENS_FILE, OWNER_ONLY)
    except OSError as exc:
        logger.warning(f"Could not restrict permissions on {TOKENS_FILE}: {exc}")
    logger.debug(f"Credential saved to {TOKENS_FILE}")


def delete_tokens() -> None:
    """Forget the saved credential.  Missing files are fine."""
    try:
        TOKENS_FILE.unlink(missing_ok=True)
    except OSError as exc:
        logger.error(f"Failed to delete {TOKENS_FILE}: {exc}")
        return
    logger.debug(f"Credential removed from {TOKENS_FILE}")
