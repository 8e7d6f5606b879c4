"""
Agent-side client for the signaling endpoint.

Implements the polling half of the negotiation:
- producer: publish_offer(), wait_for_answer(), then new_candidates()
- consumer: wait_for_offer(), publish_answer(), publish_candidate() per hint

All waiting happens here, never in the server.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from .protocol import Operation


class SignalingError(Exception):
    """The signaling endpoint rejected a request or could not be reached."""


class SignalingTimeout(SignalingError):
    """A polled value did not appear before the caller's deadline."""


class SignalingClient:
    def __init__(
        self,
        base_url: str,
        connection_id: str,
        poll_interval: float = 1.0,
        request_timeout: float = 5.0,
        http: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.connection_id = connection_id
        self.poll_interval = poll_interval
        self._owns_http = http is None
        self._http = http if http is not None else httpx.Client(base_url=base_url, timeout=request_timeout)
        self._sleep = sleep
        self._candidates_seen = 0

    def __enter__(self) -> "SignalingClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def _post(self, operation: Operation, payload: Any = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"type": operation.value, "connectionId": self.connection_id}
        if payload is not None:
            body["payload"] = payload
        try:
            response = self._http.post("/api/signaling", json=body)
        except httpx.HTTPError as e:
            raise SignalingError(f"{operation.value} request failed: {e}") from e
        if response.status_code >= 400:
            try:
                detail = response.json().get("error")
            except ValueError:
                detail = response.text
            raise SignalingError(f"{operation.value} rejected ({response.status_code}): {detail}")
        return response.json()

    # --- single requests ---

    def publish_offer(self, offer: Any) -> None:
        self._post(Operation.OFFER, offer)

    def publish_answer(self, answer: Any) -> None:
        self._post(Operation.ANSWER, answer)

    def publish_candidate(self, candidate: Any) -> None:
        self._post(Operation.CANDIDATE, candidate)

    def fetch_offer(self) -> Optional[Any]:
        return self._post(Operation.GET_OFFER).get("offer")

    def fetch_answer(self) -> Optional[Any]:
        return self._post(Operation.GET_ANSWER).get("answer")

    def fetch_candidates(self) -> List[Any]:
        return self._post(Operation.GET_CANDIDATES).get("candidates") or []

    def reset(self) -> None:
        """Abandon the session under this connection id and start over."""
        self._post(Operation.RESET)
        self._candidates_seen = 0

    # --- polling ---

    def new_candidates(self) -> List[Any]:
        """Candidates published since the previous call, in publish order."""
        candidates = self.fetch_candidates()
        if len(candidates) < self._candidates_seen:
            # The list only shrinks when one of the agents reset the session.
            logging.info(f"Candidate list for {self.connection_id!r} was reset; rewinding")
            self._candidates_seen = 0
        fresh = candidates[self._candidates_seen:]
        self._candidates_seen = len(candidates)
        return fresh

    def wait_for_offer(self, timeout: float = 30.0) -> Any:
        return self._poll(self.fetch_offer, "offer", timeout)

    def wait_for_answer(self, timeout: float = 30.0) -> Any:
        return self._poll(self.fetch_answer, "answer", timeout)

    def _poll(self, fetch: Callable[[], Optional[Any]], what: str, timeout: float) -> Any:
        deadline = time.monotonic() + timeout
        attempts = 0
        while True:
            attempts += 1
            value = fetch()
            if value is not None:
                logging.debug(f"Received {what} for {self.connection_id!r} after {attempts} poll(s)")
                return value
            if time.monotonic() >= deadline:
                raise SignalingTimeout(
                    f"No {what} for connection {self.connection_id!r} within {timeout}s"
                )
            self._sleep(self.poll_interval)
