"""Root logger setup for reconciliation jobs."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Attach a stream handler to the root logger using ``LOG_FORMAT``.

    A no-op when the root logger already has handlers, unless ``force`` is set.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, force=force)
