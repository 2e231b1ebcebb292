import logging

import numpy as np
import pytest

from CUBELIFE import logging_config
from CUBELIFE.settings import _SECTIONS


@pytest.fixture(autouse=True)
def restore_settings():
    """Settings are class attributes; put them back after every test."""
    saved = {
        section: {k: v for k, v in vars(cls).items() if not k.startswith('_') and k.isupper()}
        for section, cls in _SECTIONS.items()
    }
    yield
    for section, values in saved.items():
        for key, value in values.items():
            setattr(_SECTIONS[section], key, value)


@pytest.fixture
def reset_logging():
    """Undo setup_logging so later tests see plain propagating loggers."""
    yield
    for name in (logging_config.LOGGER_NAME, "periodic_report"):
        named_logger = logging.getLogger(name)
        for handler in named_logger.handlers[:]:
            named_logger.removeHandler(handler)
            handler.close()
        named_logger.propagate = True
        named_logger.setLevel(logging.NOTSET)
    logging.getLogger(logging_config.LOGGER_NAME).addHandler(logging.NullHandler())
    logging_config._current_log_file = None


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
