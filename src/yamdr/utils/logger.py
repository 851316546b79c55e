"""Logger factory for the yamdr package.

Every module logs under the ``yamdr`` hierarchy. The library never
installs handlers; applications configure output.

What is logged:
    WARNING: a failing block replaced by an error marker under the
        best-effort policy, and graph layout falling back to DOT source.
    DEBUG: reader dispatch, classification and segmentation counts,
        globals units and datasets, RestrictedPython compile warnings,
        and optional engines falling back to plain output.

Example:
    >>> from yamdr.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Classifying %d tokens", 12)
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "yamdr." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'yamdr.mymodule'
    """
    if not (name == "yamdr" or name.startswith("yamdr.")):
        name = f"yamdr.{name}"
    return logging.getLogger(name)
