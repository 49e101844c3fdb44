from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Tuple, Union

import requests

from .config import Config
from .errors import DecodeFailed, FetchFailed

logger = logging.getLogger(__name__)


class TreeClient:
    """Read-only client for the vstorage REST endpoints.

    ``GET {base}/children/{path}`` lists child labels and
    ``GET {base}/data/{path}`` returns the raw leaf body. A single attempt is
    made per call; retrying is left to the user.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        connect_timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        # (connect, read) when a separate connect timeout is given
        self.timeout: Union[float, Tuple[float, float]] = (
            timeout if connect_timeout is None else (min(connect_timeout, timeout), timeout)
        )
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg: Config) -> "TreeClient":
        return cls(cfg.api_base_url, timeout=cfg.timeout, connect_timeout=cfg.connect_timeout)

    def children_url(self, path: str) -> str:
        return f"{self.base_url}/children/{path}"

    def data_url(self, path: str) -> str:
        return f"{self.base_url}/data/{path}"

    def _get(self, url: str) -> str:
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FetchFailed(f"failed to make request: {e}", url=url, status_code=status) from e
        except requests.exceptions.RequestException as e:
            raise FetchFailed(f"failed to make request: {e}", url=url) from e
        logger.debug("GET %s -> %s (%d bytes)", url, resp.status_code, len(resp.content or b""))
        return resp.text

    def fetch_children(self, path: str) -> List[str]:
        """Return the child labels of ``path`` in server order.

        An empty list is the normal answer for a leaf.
        """
        body = self._get(self.children_url(path))
        try:
            payload: Any = json.loads(body)
        except ValueError as e:
            raise DecodeFailed(f"failed to unmarshal JSON: {e}") from e

        if not isinstance(payload, dict):
            raise DecodeFailed(f"expected a JSON object, got {type(payload).__name__}")

        # pagination is accepted and ignored
        children = payload.get("children")
        if children is None:
            return []
        if not isinstance(children, list) or not all(isinstance(c, str) for c in children):
            raise DecodeFailed("'children' must be an array of strings")
        return list(children)

    def fetch_leaf(self, path: str) -> str:
        """Return the raw body of the data endpoint, undecoded."""
        return self._get(self.data_url(path))

    def close(self) -> None:
        self.session.close()


def list_children(cfg: Config, path: str) -> List[str]:
    """Return child labels for ``path`` using a client built from ``cfg``."""
    client = TreeClient.from_config(cfg)
    try:
        return client.fetch_children(path)
    finally:
        client.close()


def get_leaf(cfg: Config, path: str) -> str:
    """Return the raw leaf body for ``path`` using a client built from ``cfg``."""
    client = TreeClient.from_config(cfg)
    try:
        return client.fetch_leaf(path)
    finally:
        client.close()
