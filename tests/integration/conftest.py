"""
Fixtures for integration tests against a real MongoDB.

A single ``mongo:7.0`` container is started per test session; every test
gets its own database, dropped afterwards.
"""

import uuid
from typing import Generator

import pytest
from pymongo import AsyncMongoClient
from testcontainers.mongodb import MongoDbContainer

from learnsphere.src.repositories import mongo_repositories


@pytest.fixture(scope="session")
def mongodb_container() -> Generator[MongoDbContainer, None, None]:
    """Start MongoDB container for integration tests."""
    container = MongoDbContainer("mongo:7.0")
    container.start()
    yield container
    container.stop()


@pytest.fixture(scope="session")
def mongo_url(mongodb_container) -> str:
    return mongodb_container.get_connection_url()


@pytest.fixture
def database_name() -> str:
    return f"learnsphere_test_{uuid.uuid4().hex[:12]}"


@pytest.fixture
async def mongo_database(mongo_url, database_name):
    """Fresh database on the shared container."""
    client = AsyncMongoClient(mongo_url, tz_aware=True)
    try:
        yield client[database_name]
    finally:
        await client.drop_database(database_name)
        await client.close()


@pytest.fixture
async def repositories(mongo_database):
    """MongoDB repositories with their indexes created."""
    repos = mongo_repositories(mongo_database)
    await repos.ensure_indexes()
    return repos
