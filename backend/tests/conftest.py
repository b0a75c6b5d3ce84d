"""
Test Configuration Module
"""

import json
from typing import Any, Callable

import pytest

from app.common.token_estimator import HeuristicTokenEstimator


def _sequential_ids() -> Callable[[], str]:
    counter = {"value": 0}

    def _next_id() -> str:
        counter["value"] += 1
        return f"id_{counter['value']}"

    return _next_id


@pytest.fixture
def id_generator_factory() -> Callable[[], Callable[[], str]]:
    """Creates fresh deterministic generators, each starting again at id_1."""
    return _sequential_ids


@pytest.fixture
def id_generator(id_generator_factory) -> Callable[[], str]:
    """Deterministic identifier generator: id_1, id_2, ..."""
    return id_generator_factory()


@pytest.fixture
def estimator() -> HeuristicTokenEstimator:
    return HeuristicTokenEstimator()


@pytest.fixture
def parse_sse() -> Callable[[bytes], list[tuple[str, dict[str, Any]]]]:
    """Parse encoded Claude events into (event name, payload) pairs."""

    def _parse(data: bytes) -> list[tuple[str, dict[str, Any]]]:
        events = []
        for record in data.decode("utf-8").split("\n\n"):
            if not record.strip():
                continue
            name_line, data_line = record.split("\n")
            assert name_line.startswith("event: ")
            assert data_line.startswith("data: ")
            events.append((name_line[len("event: "):], json.loads(data_line[len("data: "):])))
        return events

    return _parse
