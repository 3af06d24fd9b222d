"""Shared pytest fixtures for extjson tests."""

import os

import pytest

from extjson.core.config import INDENT_VAR, MAX_DEPTH_VAR


def pytest_configure(config: pytest.Config) -> None:
    """Run the suite with default settings; tests that need EXTJSON_* set it themselves."""
    for var in (MAX_DEPTH_VAR, INDENT_VAR):
        os.environ.pop(var, None)


@pytest.fixture
def sample_document() -> str:
    """A document using every extended type."""
    return """{
    _id: ObjectId("4d8e5d1b6a9e4c2f3a1b0c9d"),
    created: ISODate("2011-03-26T18:44:27Z"),
    owner: DBRef("users", ObjectId("4d8e5d1b6a9e4c2f3a1b0c9e")),
    pattern: /^a.*z$/i,
    payload: BinData(0, "AAECAw=="),
    score: NaN
}"""
