"""Shared logging helpers for docwrite."""

from __future__ import annotations

import logging


def configure_logging(
    *,
    level: int = logging.INFO,
    sql_level: int = logging.WARNING,
    force: bool = False,
) -> None:
    """Initialise the root logger once with a terse CLI format.

    ``sql_level`` applies to the ``sqlalchemy.engine`` logger separately so that
    debugging batch dispatch does not also dump every emitted statement. Pass
    ``force=True`` to reconfigure during tests or specialised entry points.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)
