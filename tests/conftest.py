"""Shared fixtures for the planet generator tests."""

import logging

import pytest


@pytest.fixture
def logger():
    return logging.getLogger("PlanetGeneratorTests")


@pytest.fixture
def small_config():
    """A planet small enough to build in well under a second."""
    return {
        'seed': 12345,
        'num_sample_points': 1000,
        'num_plates': 10,
        'continental_ratio': 0.3,
        'planet_radius_km': 6370.0,
    }
