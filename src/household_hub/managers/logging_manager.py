"""
# Logging Manager

Central factory for the application's loggers. Every module obtains its logger through
`get_logger(prefix=...)`, so all output shares one handler, one format and one level
(`settings.DEFAULT_LOG_LEVEL`), and each line carries the owning component's prefix:

```
2024-01-01 12:00:00,000 INFO household_hub [FamilySettingsService] Updating family settings
```

## Usage

```python
from household_hub.managers.logging_manager import get_logger

logger = get_logger(prefix="[FamilySettingsRepository]")
logger.info("Created index %s", "idx_family_settings_family_id")
```
"""

import logging
import sys
from typing import Any, MutableMapping, Tuple

from household_hub.config import settings

DEFAULT_LOGGER_NAME = "household_hub"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_configured = False


class PrefixedLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that prepends a component prefix to every message."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        prefix = self.extra.get("prefix") if self.extra else ""
        if prefix:
            return f"{prefix} {msg}", kwargs
        return msg, kwargs


def _configure_root(name: str) -> None:
    global _configured
    if _configured:
        return

    base_logger = logging.getLogger(name)
    if not base_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        base_logger.addHandler(handler)

    level = getattr(logging, settings.DEFAULT_LOG_LEVEL.upper(), logging.INFO)
    base_logger.setLevel(level)
    base_logger.propagate = True
    _configured = True


def get_logger(name: str = DEFAULT_LOGGER_NAME, prefix: str = "") -> PrefixedLoggerAdapter:
    """
    Return a logger for `name`, optionally tagging each message with `prefix`.

    Args:
        name: Logger name. Child names (``household_hub.db``) inherit the base handler.
        prefix: Component tag, e.g. ``"[DATABASE]"``.

    Returns:
        PrefixedLoggerAdapter: Adapter exposing the standard logging API.
    """
    _configure_root(DEFAULT_LOGGER_NAME)
    return PrefixedLoggerAdapter(logging.getLogger(name), {"prefix": prefix})
