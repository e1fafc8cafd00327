# ==================================================================================================
#                                   Logging
# ==================================================================================================
#
# Logging bootstrap used by the `paf` CLI entry point.
# Library modules only call `logging.getLogger(__name__)`; handlers and format
# are configured here, once, by whoever owns the process.

import logging

LOG_FORMAT: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure global logging once.

    Parameters
    ----------
    level
        Logging level.

    Usage example
    -------------
        configure_logging()
        logging.getLogger(__name__).info("hello")
    """
    # Repeated calls keep existing handlers (no `force=True`) so embedding
    # environments are not reset.
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
    )
