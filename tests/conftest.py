from __future__ import annotations

import copy

import pytest

from askuser.models import parse_questions
from fakes import COLOR, DEPLOY, FEATURES


@pytest.fixture
def raw_batch() -> list[dict]:
    """Single-select, multi-select, single-select."""
    return copy.deepcopy([COLOR, FEATURES, DEPLOY])


@pytest.fixture
def questions(raw_batch):
    return parse_questions(raw_batch)


@pytest.fixture
def color_raw() -> dict:
    return copy.deepcopy(COLOR)
