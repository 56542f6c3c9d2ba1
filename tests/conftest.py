"""Pytest fixtures for store testing."""

import pytest

from local_store import LocalStore, StoreConfig, StoreLogger


@pytest.fixture(scope="function")
def store_logger(tmp_path):
    """A file logger in tmp_path that stays off stderr."""
    return StoreLogger(tmp_path / "store.log", to_stderr=False)


@pytest.fixture(scope="function")
def store(tmp_path, store_logger):
    """Provides a clean store rooted at tmp_path."""
    config = StoreConfig.rooted_at(tmp_path, log_to_stderr=False)
    yield LocalStore(config, logger=store_logger)
    store_logger.clear()


@pytest.fixture
def documents(store):
    return store.documents


@pytest.fixture
def blobs(store):
    return store.blobs
