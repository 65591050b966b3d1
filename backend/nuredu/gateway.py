"""HTTP client for the lesson endpoints of the nuredu API.

`LessonGateway` wraps an `httpx.Client`. Every method is a single
request; nothing is cached. Transport failures, non-2xx responses and
bodies that are not JSON raise `NetworkError`. `list()` decodes the
serialized-array fields of every row and lets `ParseError` propagate
to the caller.

Any `httpx.Client` works, including FastAPI's `TestClient`, which is
how the tests drive the gateway against the real application.
"""

import logging
from typing import Iterable, List, Optional, Union

import httpx
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from . import schemas
from .config import settings
from .errors import NetworkError
from .utils.serialized import ARRAY_FIELDS, load_list

logger = logging.getLogger("nuredu.gateway")

Payload = Union[schemas.LessonPayload, dict]


class LessonGateway:
    """createLesson / getLessons / updateLesson / deleteLessons over HTTP."""

    def __init__(self, client: Optional[httpx.Client] = None, token: Optional[str] = None,
                 base_url: Optional[str] = None, timeout: Optional[float] = None):
        self._owns_client = client is None
        self.client = client or httpx.Client(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.API_TIMEOUT_SECONDS,
        )
        self.token = token

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            resp = self.client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("lesson api %s %s failed: %s", method, url, exc)
            raise NetworkError(f"{method} {url} failed: {exc}") from exc
        if resp.is_error:
            logger.warning("lesson api %s %s returned %s", method, url, resp.status_code)
            raise NetworkError(f"{method} {url} returned {resp.status_code}", status_code=resp.status_code)
        return resp

    @staticmethod
    def _body(payload: Payload) -> dict:
        if isinstance(payload, BaseModel):
            return payload.model_dump(by_alias=True)
        return dict(payload)

    @staticmethod
    def _json(resp: httpx.Response, what: str):
        try:
            return resp.json()
        except ValueError as exc:
            raise NetworkError(f"{what} returned a non-JSON body", status_code=resp.status_code) from exc

    def create(self, payload: Payload) -> dict:
        """POST a new lesson; returns the stored row as sent by the server."""
        return self._json(self._request("POST", "/lessons", json=self._body(payload)), "POST /lessons")

    def update(self, payload: Payload) -> dict:
        """PUT a full lesson; `payload` must carry the lesson `id`."""
        body = self._body(payload)
        lesson_id = body.pop("id", None)
        if not lesson_id:
            raise ValueError("update payload needs an id")
        url = f"/lessons/{lesson_id}"
        return self._json(self._request("PUT", url, json=body), f"PUT {url}")

    def delete(self, ids: Iterable[str]) -> int:
        """Delete every lesson in `ids`; returns the server's deleted count."""
        resp = self._request("POST", "/lessons/delete", json={"ids": sorted(ids)})
        return self._json(resp, "POST /lessons/delete").get("deleted", 0)

    def list(self) -> List[schemas.LessonRecord]:
        """Fetch all lessons and decode their serialized-array fields."""
        rows = self._json(self._request("GET", "/lessons"), "GET /lessons")
        return [self.decode_row(row) for row in rows]

    @staticmethod
    def decode_row(row: dict) -> schemas.LessonRecord:
        data = dict(row)
        for field in ARRAY_FIELDS:
            key = to_camel(field)
            data[key] = load_list(data.get(key), field=key)
        return schemas.LessonRecord.model_validate(data)
