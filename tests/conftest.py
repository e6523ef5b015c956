"""
Shared test fixtures.
"""

import pytest

from prd_mockups.utils.llm_logger import get_logger


@pytest.fixture(autouse=True)
def quiet_llm_logger():
    """Keep LLM call logging off unless a test turns it on."""
    logger = get_logger()
    logger.configure(level="NONE", log_to_file=False, log_dir="outputs")
    yield logger
    logger.configure(level="NONE", log_to_file=False, log_dir="outputs")
