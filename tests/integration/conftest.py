"""Pytest configuration and fixtures for integration tests.

Loads .env from the project root and skips tests whose live backend is not
configured or not reachable.
"""

import asyncio
import os
from pathlib import Path

import aiohttp
import pytest
import pytest_asyncio
from dotenv import load_dotenv


def pytest_configure(config):
    """Load .env before test collection so src.utils.config sees the keys."""
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    print("\n" + "=" * 70)
    print("Note: integration tests call live services")
    print(f"Environment loaded from: {env_path}")
    print(f"  - SPOONACULAR_API_KEY: {'set' if os.getenv('SPOONACULAR_API_KEY') else 'MISSING (tests skipped)'}")
    print(f"  - GEMINI_API_KEY: {'set' if os.getenv('GEMINI_API_KEY') else 'MISSING (tests skipped)'}")
    print("=" * 70 + "\n")


@pytest.fixture
def spoonacular_key():
    key = os.getenv("SPOONACULAR_API_KEY")
    if not key:
        pytest.skip("SPOONACULAR_API_KEY not set. Please set it in your .env file.")
    return key


@pytest.fixture
def gemini_key():
    key = os.getenv("GEMINI_API_KEY")
    if not key:
        pytest.skip("GEMINI_API_KEY not set. Please set it in your .env file.")
    return key


@pytest_asyncio.fixture
async def mealdb_reachable():
    """Skip when TheMealDB cannot be reached from this machine."""
    from src.utils.config import config

    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                f"{config.MEALDB_BASE_URL}/search.php",
                params={"s": "Arrabiata"},
                timeout=aiohttp.ClientTimeout(total=5),
            ) as response:
                if response.status != 200:
                    pytest.skip(f"TheMealDB not accessible. Status: {response.status}")
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
        pytest.skip(f"Cannot connect to TheMealDB: {e}")
