import logging

import pytest

from loan_schedule.logging_config import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by the CLI so they do not outlive the test's streams."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
