"""Pytest configuration and shared fixtures."""

import pytest

# Load environment variables from .env file at test startup
from dotenv import load_dotenv
load_dotenv()

# Import all fixtures from the fixture modules
pytest_plugins = [
    "tests.fixtures.filesystem",
    "tests.fixtures.sessions",
    "tests.fixtures.api",
]
