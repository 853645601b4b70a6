import logging
from typing import List

import pytest

import binable
from binable.classification import Classifier

logging.basicConfig(level=logging.DEBUG)
log = logging.getLogger(__name__)

log.info(f"testing binable {binable.__version__}")


@pytest.fixture  # type: ignore
def sample_values() -> List[float]:
    return [0.1, 3.4, 3.5, 3.6, 7.0, 9.0, 6.0, 4.4, 2.5, 3.9, 4.5, 2.8]


@pytest.fixture  # type: ignore
def classifier() -> Classifier:
    return Classifier()
