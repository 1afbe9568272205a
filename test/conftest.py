import numpy as np
import pytest
from loguru import logger


@pytest.fixture
def scenario_labels() -> np.ndarray:
    return np.array([[5, 5], [10, 10]], dtype=np.uint16)


@pytest.fixture
def scenario_colors() -> np.ndarray:
    return np.array(
        [
            [(10, 10, 10), (20, 20, 20)],
            [(30, 30, 30), (40, 40, 40)],
        ],
        dtype=np.uint8,
    )


@pytest.fixture
def random_segmentation() -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(0)
    labels = rng.choice(np.array([3, 17, 42, 900, 65000], dtype=np.uint32), size=(32, 48))
    colors = rng.integers(0, 256, size=(32, 48, 3), dtype=np.uint8)
    return labels, colors


@pytest.fixture
def log_records():
    records: list[dict] = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG", format="{message}")
    try:
        yield records
    finally:
        logger.remove(sink_id)
