"""
Request dispatch with a fixed retry schedule.

RequestDispatcher issues GET {leader}/{path} with basic auth, retrying only
on transport failures or malformed bodies. An HTTP error status or an error
envelope is a valid answer and stops the loop: nothing is re-sent once a
response has been parsed, so retries never duplicate a side effect.

Example:
    ```python
    dispatcher = RequestDispatcher(session)
    result = dispatcher.request("instance/db-1:3306")
    ```
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

import httpx

from orchestrator_client.envelope import ApiResponse, Envelope, decode_response
from orchestrator_client.exceptions import ApiUnreachableError, ApplicationError
from orchestrator_client.session import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetrySchedule:
    """
    Fixed backoff schedule for API calls.

    Each entry is one attempt; the value is the sleep after that attempt
    fails. The last entry is 0 so there is no trailing sleep once the
    attempts run out.

    Attributes:
        intervals: Seconds to sleep after each failed attempt.
    """

    intervals: tuple[float, ...] = (0.1, 0.2, 0.5, 1.0, 2.0, 2.5, 5.0, 0.0)

    @property
    def max_attempts(self) -> int:
        return len(self.intervals)

    def total_wait(self) -> float:
        """Worst-case time spent sleeping for one call."""
        return sum(self.intervals)


@dataclass
class RequestDispatcher:
    """
    Executes API paths against the session leader.

    Attributes:
        session: Session supplying leader, client, auth and timeout.
        schedule: Retry schedule.
        sleep: Sleep function, injectable for tests.
    """

    session: Session
    schedule: RetrySchedule = field(default_factory=RetrySchedule)
    sleep: Callable[[float], None] = time.sleep

    def call(self, path: str) -> ApiResponse:
        """
        GET a path on the leader and decode the response.

        Args:
            path: API path relative to the leader, e.g. "clusters".

        Returns:
            The decoded response. An error envelope is returned, not raised.

        Raises:
            NoLeaderFoundError: If the leader cannot be resolved.
            ApiUnreachableError: If every attempt failed at the transport level.
        """
        leader = self.session.get_leader()
        url = f"{leader}/{path.lstrip('/')}"
        last_error = ""

        for attempt, wait in enumerate(self.schedule.intervals, start=1):
            try:
                response = self.session.http.get(
                    url,
                    auth=self.session.credentials.as_tuple(),
                    timeout=self.session.timeout,
                )
                result = decode_response(response.text)
            except (httpx.HTTPError, ValueError) as e:
                last_error = str(e)
                logger.warning(
                    "Attempt %d/%d for %s failed: %s",
                    attempt,
                    self.schedule.max_attempts,
                    url,
                    e,
                )
                if wait > 0:
                    self.sleep(wait)
                continue

            logger.debug("GET %s -> %d (attempt %d)", url, response.status_code, attempt)
            return result

        raise ApiUnreachableError(leader, path, self.schedule.max_attempts, last_error)

    def request(self, path: str) -> ApiResponse:
        """
        Call a path and fail on an error envelope.

        Returns:
            A successful response: raw array, scalar, object or OK envelope.

        Raises:
            ApplicationError: If the envelope Code marks an error.
            NoLeaderFoundError, ApiUnreachableError: As for call().
        """
        result = self.call(path)
        if isinstance(result, Envelope) and result.is_error:
            raise ApplicationError(result.normalized_message(), result.details)
        return result
