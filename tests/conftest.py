"""Shared test configuration and fixtures."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from pbreader.services import pb_service

# Load .env from project root for all tests
root = Path(__file__).parent.parent.resolve()
load_dotenv(root / ".env")

APPROVAL_PB = """META
key;value
description;Example district
country;Poland
unit;Warszawa
instance;2023
subunit;Bemowo
num_projects;3
num_votes;4
budget;1000
currency;PLN
vote_type;approval
rule;greedy
comment;#1: first remark #2: second remark.
PROJECTS
project_id;cost;name
1;600;Park
2;300;Library
3;250;Bike lane
VOTES
voter_id;vote;age
10;1,2;31
11;2;45
12;1, 3;22
13;3;60
"""

ORDINAL_PB = """META
key;value
num_projects;4
num_votes;3
budget;1000
vote_type;ordinal
min_length;2
max_length;3
scoring_fn;none
rule;Condorcet
PROJECTS
project_id;cost
1;999
2;998
3;997
4;996
VOTES
voter_id;vote
0;1,2
1;2, 1 ,4
2;2,3
"""

CUMULATIVE_PB = """META
key;value
num_projects;2
num_votes;2
budget;500
vote_type;cumulative
rule;greedy
PROJECTS
project_id;cost
a;200
b;300
VOTES
voter_id;vote;points
v1;a,b;7,3
v2;b;10
"""


@pytest.fixture
def approval_text():
    return APPROVAL_PB


@pytest.fixture
def ordinal_text():
    return ORDINAL_PB


@pytest.fixture
def cumulative_text():
    return CUMULATIVE_PB


@pytest.fixture
def pb_dir(tmp_path, monkeypatch):
    """A PB_FILES_DIR holding two valid files and a broken one."""
    (tmp_path / "poland_warszawa_2023.pb").write_text(APPROVAL_PB, encoding="utf-8")
    (tmp_path / "ordinal.pb").write_text(ORDINAL_PB, encoding="utf-8")
    (tmp_path / "broken.pb").write_text(
        APPROVAL_PB.replace("VOTES\n", "BALLOTS\n"), encoding="utf-8"
    )
    (tmp_path / "notes.txt").write_text("not a pb file", encoding="utf-8")
    monkeypatch.setenv("PB_FILES_DIR", str(tmp_path))
    pb_service.invalidate_caches()
    yield tmp_path
    pb_service.invalidate_caches()


@pytest.fixture(scope="session")
def app():
    from pbreader.web import create_app

    return create_app({"TESTING": True, "RATELIMIT_ENABLED": False})


@pytest.fixture
def client(app, pb_dir):
    return app.test_client()
