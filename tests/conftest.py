from __future__ import annotations

from typing import Dict, List, Union

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's real config files out of every test."""
    monkeypatch.delenv("VSTCTL_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-home"))
    monkeypatch.setenv("XDG_CONFIG_DIRS", str(tmp_path / "xdg-dirs"))


class FakeTreeClient:
    """In-memory stand-in for TreeClient that records every call."""

    def __init__(
        self,
        children: Dict[str, Union[List[str], Exception]],
        leaves: Dict[str, Union[str, Exception]] | None = None,
    ):
        self.children = children
        self.leaves = leaves or {}
        self.children_calls: List[str] = []
        self.leaf_calls: List[str] = []

    def fetch_children(self, path: str) -> List[str]:
        self.children_calls.append(path)
        result = self.children.get(path, [])
        if isinstance(result, Exception):
            raise result
        return list(result)

    def fetch_leaf(self, path: str) -> str:
        self.leaf_calls.append(path)
        result = self.leaves.get(path, "{}")
        if isinstance(result, Exception):
            raise result
        return result

    def close(self) -> None:
        pass


@pytest.fixture
def fake_client_factory():
    return FakeTreeClient
