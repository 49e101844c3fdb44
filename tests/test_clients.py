from __future__ import annotations

from unittest.mock import Mock

import pytest
import requests

from vstlib.clients import TreeClient, list_children
from vstlib.config import Config
from vstlib.errors import DecodeFailed, FetchFailed


BASE = "https://vstorage.example/agoric/vstorage"


def make_session(text: str = "", status: int = 200, exc: Exception | None = None) -> Mock:
    session = Mock()
    if exc is not None:
        session.get.side_effect = exc
        return session
    resp = Mock()
    resp.text = text
    resp.content = text.encode()
    resp.status_code = status
    if status >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} Error", response=resp)
    else:
        resp.raise_for_status.return_value = None
    session.get.return_value = resp
    return session


def test_fetch_children_builds_url_and_keeps_order():
    session = make_session('{"children":["b","a","c"],"pagination":null}')
    client = TreeClient(BASE + "/", timeout=5, session=session)

    assert client.fetch_children("published.agoricNames") == ["b", "a", "c"]
    session.get.assert_called_once_with(f"{BASE}/children/published.agoricNames", timeout=5)


def test_fetch_children_empty_list_is_not_an_error():
    client = TreeClient(BASE, session=make_session('{"children":[],"pagination":{"next_key":null}}'))
    assert client.fetch_children("published.a") == []


@pytest.mark.parametrize("body", ['{"children":null}', '{"pagination":null}'])
def test_fetch_children_missing_children_is_empty(body):
    client = TreeClient(BASE, session=make_session(body))
    assert client.fetch_children("published.a") == []


@pytest.mark.parametrize(
    "body",
    [
        "<html>bad gateway</html>",
        '["a","b"]',
        '{"children":"a"}',
        '{"children":["a",1]}',
    ],
)
def test_fetch_children_rejects_unexpected_shapes(body):
    client = TreeClient(BASE, session=make_session(body))
    with pytest.raises(DecodeFailed):
        client.fetch_children("published")


def test_transport_error_becomes_fetch_failed():
    session = make_session(exc=requests.exceptions.ConnectionError("connection refused"))
    client = TreeClient(BASE, session=session)

    with pytest.raises(FetchFailed) as exc_info:
        client.fetch_children("published")
    assert exc_info.value.url == f"{BASE}/children/published"
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)


def test_timeout_becomes_fetch_failed():
    client = TreeClient(BASE, session=make_session(exc=requests.exceptions.Timeout("timed out")))
    with pytest.raises(FetchFailed):
        client.fetch_leaf("published.a")


def test_non_2xx_becomes_fetch_failed_with_status():
    client = TreeClient(BASE, session=make_session("oops", status=500))
    with pytest.raises(FetchFailed) as exc_info:
        client.fetch_children("published")
    assert exc_info.value.status_code == 500


def test_fetch_leaf_returns_body_verbatim():
    raw = r'{"value":"{\"blockHeight\":\"1\"}"}'
    session = make_session(raw)
    client = TreeClient(BASE, timeout=3, session=session)

    assert client.fetch_leaf("published.a.b") == raw
    session.get.assert_called_once_with(f"{BASE}/data/published.a.b", timeout=3)


def test_list_children_uses_config_and_closes(monkeypatch):
    session = make_session('{"children":["x"]}')
    monkeypatch.setattr("vstlib.clients.requests.Session", lambda: session)

    cfg = Config(api_base_url=BASE, timeout=2, connect_timeout=0.5)
    assert list_children(cfg, "published") == ["x"]
    session.get.assert_called_once_with(f"{BASE}/children/published", timeout=(0.5, 2))
    session.close.assert_called_once()


def test_connect_timeout_is_capped_by_read_timeout():
    session = make_session('{"children":[]}')
    client = TreeClient(BASE, timeout=1, session=session, connect_timeout=3.05)

    client.fetch_children("published")
    session.get.assert_called_once_with(f"{BASE}/children/published", timeout=(1, 1))
