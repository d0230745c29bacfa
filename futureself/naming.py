"""Target object naming for uploaded selfies."""
import re
import secrets
import string
import time
from typing import Optional

from .models import PluginConfig

_WHITESPACE = re.compile(r"\s+")
_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
TOKEN_LENGTH = 9


def make_unique_id(now_ms: Optional[int] = None) -> str:
    """``<ms timestamp>-<random base36 token>``."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    token = "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))
    return f"{now_ms}-{token}"


def normalize_profession(profession: str) -> str:
    return _WHITESPACE.sub("", profession.lower())


def make_object_name(
    profession: str,
    config: Optional[PluginConfig] = None,
    now_ms: Optional[int] = None,
) -> str:
    """
    Build the storage object name for a submission.

    Example: ``previous-chimneysweep-1729350000000-k3j9x0a2b.jpg``
    """
    config = config or PluginConfig()
    return (
        f"{config.object_prefix}-{normalize_profession(profession)}-"
        f"{make_unique_id(now_ms)}{config.object_extension}"
    )
