import logging
from pathlib import Path

import pytest
from pytest import FixtureRequest

from clmm_quoter.utils import random_address


@pytest.fixture(name="random_address")
def fixture_random_address():
    def _generate_random_address() -> str:
        return random_address()

    return _generate_random_address


@pytest.fixture(scope="function")
def debug_logger(request: FixtureRequest):
    log_filename = request.module.__name__.replace("tests.", "") + "." + request.function.__name__

    log_dir = Path(__file__).parent / "logs"
    log_dir.mkdir(exist_ok=True)
    log_file = log_dir / f"{log_filename}.log"

    formatter = logging.Formatter(
        "%(levelname)-8s | %(name)-36s | %(asctime)-15s | %(message)s \t\t (%(filename)s --> %(funcName)s)"
    )

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)

    logger = logging.getLogger("clmm_quoter")
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG)

    logger.info("-" * 100)
    logger.info(f"\t\tInitializing New Run for Test: {request.function.__name__}")
    logger.info("-" * 100)

    yield logger

    logger.removeHandler(file_handler)
    file_handler.close()
