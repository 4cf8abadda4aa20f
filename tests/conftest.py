import os
import random
import string
import tempfile
from dataclasses import dataclass
from datetime import datetime

import pytest

# Point the app at a throwaway database before taskboard.db builds its engine.
_db_dir = tempfile.mkdtemp(prefix="taskboard-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_dir}/test.sqlite"


@dataclass
class Member:
    id: str
    name: str


@pytest.fixture
def roster():
    return [
        Member("1", "Alice Johnson"),
        Member("2", "Bob Smith"),
        Member("3", "Carol Davis"),
        Member("4", "David Wilson"),
    ]


@pytest.fixture
def now():
    # a Monday
    return datetime(2024, 1, 15, 10, 0)


@pytest.fixture
def sfx():
    """Random letters so rows from different tests never collide in the shared database."""
    return "".join(random.choices(string.ascii_lowercase, k=8))
