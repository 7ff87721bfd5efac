# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bounded-concurrency fuzz dispatcher."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from ..config import FailurePolicy, RequestConfig
from ..errors import error_category_to_reason
from ..http.client import HttpClient
from ..http.headers import build_request_headers
from ..http.models import HeaderList, HttpRequest, HttpResponse, RetryConfig
from ..http.retry import send_with_retries
from ..http.url import probed_token
from ..models.result import TRANSPORT_FAILURE_STATUS, FuzzResult, ResultCollection
from .classifier import classify

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]
ResultCallback = Callable[[FuzzResult], None]


class AdmissionGate:
    """Counting limiter for in-flight requests; records the peak number of holders."""

    def __init__(self, limit: int):
        if limit < 1:
            raise ValueError("limit must be a positive integer")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self.in_flight = 0
        self.peak = 0

    async def __aenter__(self) -> AdmissionGate:
        await self._semaphore.acquire()
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        return self

    async def __aexit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.in_flight -= 1
        self._semaphore.release()


class FuzzDispatcher:
    """
    Issue one GET per target with at most ``config.concurrency`` requests in flight.

    Each target runs as its own task: acquire a slot, wait the rate-limit delay, send,
    classify, record, release. Responses whose status is in the matcher set become
    FuzzResults; other statuses are dropped silently. Transport failures follow
    ``failure_policy``. ``run()`` returns only after every task has settled.
    """

    def __init__(
        self,
        client: HttpClient,
        config: RequestConfig,
        *,
        failure_policy: FailurePolicy = FailurePolicy.DISCARD,
        retry_config: RetryConfig | None = None,
        on_progress: ProgressCallback | None = None,
        on_result: ResultCallback | None = None,
    ):
        self.client = client
        self.config = config
        self.failure_policy = FailurePolicy(failure_policy)
        self.retry_config = retry_config or RetryConfig(max_attempts=1)
        self.on_progress = on_progress
        self.on_result = on_result
        self.gate = AdmissionGate(config.concurrency)
        self.results = ResultCollection()
        self.processed = 0
        self._headers: HeaderList = build_request_headers(config.headers, config.cookies, config.bearer_token)
        self._cancelled = asyncio.Event()
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop admitting new targets and abort the ones in flight."""
        self._cancelled.set()
        for task in self._tasks:
            if not task.done():
                task.cancel()

    async def run(self, targets: Sequence[str]) -> ResultCollection:
        self._tasks = [asyncio.create_task(self._probe(target)) for target in targets]
        try:
            outcomes = await asyncio.gather(*self._tasks, return_exceptions=True)
        finally:
            self._tasks = []
        for outcome in outcomes:
            if isinstance(outcome, Exception):
                # Surface worker errors once every task has settled.
                raise outcome
        return self.results

    async def _probe(self, target: str) -> None:
        if self.cancelled:
            return
        async with self.gate:
            if self.config.rate_limit_ms > 0:
                await asyncio.sleep(self.config.rate_limit_ms / 1000)
            if self.cancelled:
                return
            request = HttpRequest(url=target, headers=list(self._headers), timeout=self.config.timeout)
            response = await send_with_retries(self.client, request, retry_config=self.retry_config)
            try:
                await self._settle(target, response)
            finally:
                self._advance()

    async def _settle(self, target: str, response: HttpResponse) -> None:
        token = probed_token(target)
        classification = classify(response, token)
        if classification is None:
            await self._handle_failure(target, token, response)
            return

        if classification.status not in self.config.match_codes:
            return

        logger.info("%s - %s%s", classification.status, target, classification.markers())
        await self._record(
            FuzzResult(
                url=target,
                word=token,
                status=classification.status,
                reflected=classification.reflected,
                error=classification.error_annotation,
            )
        )

    async def _handle_failure(self, target: str, token: str, response: HttpResponse) -> None:
        if self.failure_policy is FailurePolicy.DISCARD:
            return
        message = response.error_message or "request failed"
        logger.warning("ERR  - %s [error: %s]", target, message)
        if self.failure_policy is not FailurePolicy.COLLECT:
            return
        reason = error_category_to_reason(response.meta.get("error_category"))
        await self._record(
            FuzzResult(
                url=target,
                word=token,
                status=TRANSPORT_FAILURE_STATUS,
                reflected=False,
                error=f"{reason}: {message}" if reason else message,
            )
        )

    async def _record(self, result: FuzzResult) -> None:
        await self.results.append(result)
        if self.on_result is not None:
            self.on_result(result)

    def _advance(self) -> None:
        self.processed += 1
        if self.on_progress is not None:
            self.on_progress(1)


async def dispatch(
    client: HttpClient,
    targets: Sequence[str],
    config: RequestConfig,
    **kwargs,
) -> ResultCollection:
    """Run a FuzzDispatcher over ``targets`` and return its results."""
    return await FuzzDispatcher(client, config, **kwargs).run(targets)


__all__ = ["AdmissionGate", "FuzzDispatcher", "dispatch"]
