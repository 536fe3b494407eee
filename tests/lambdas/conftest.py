"""Pytest fixtures for lambda handler tests."""

import pytest


@pytest.fixture(autouse=True)
def clear_kms_cache():
    """Clear the cached keyword cache before each test."""
    from lambdas.kms_refresh.handler import _clear_kms_cache

    _clear_kms_cache()
    yield
    _clear_kms_cache()
