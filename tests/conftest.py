import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_oobsetup_log_level():
    """Undo logger levels the CLI sets up so they don't leak between tests"""
    pkg_logger = logging.getLogger("oobsetup")
    saved = pkg_logger.level
    yield
    pkg_logger.setLevel(saved)
