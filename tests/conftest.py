"""Shared fixtures for the page capture tests."""

import itertools

import pytest


@pytest.fixture
def tokens():
    counter = itertools.count(1)
    return lambda: f"tok{next(counter)}"
