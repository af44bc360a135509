"""
Pytest configuration and shared fixtures.

- settings: default stack settings with two availability zones
- plan: the storage stack plan built from those settings
"""

import pytest

from storage_stack.plan import build_plan
from storage_stack.settings import NetworkSettings, StackSettings


@pytest.fixture
def settings() -> StackSettings:
    """Return settings for a two-zone test stack."""
    return StackSettings(
        environment='test',
        region='us-east-1',
        network=NetworkSettings(availability_zones=('us-east-1a', 'us-east-1b')),
    )


@pytest.fixture
def plan(settings):
    """Return the plan built from the default settings."""
    return build_plan(settings)
