"""
Retry coordinator: the attempt loop of one logical request.

Per attempt the coordinator merges client-jar cookies into the outgoing
config, submits through the transport, stores Set-Cookie values, asks the
strategy chain for a decision and either waits and resubmits or hands back
the final response (or raises the final error), augmented with the request
snapshot.

Usage:
    coordinator = RetryCoordinator(transport, cookie_jar)
    response = await coordinator.execute(state)
"""

import asyncio
from typing import Any, Optional

from cloud_service_client.cookies.store import CookieStore
from cloud_service_client.models.enums import RetryOutcome
from cloud_service_client.models.retry_models import AttemptContext, RetryDecision
from cloud_service_client.retry.chain import RetryStrategyChain
from cloud_service_client.session.request_state import CLIENT_OPTIONS_KEY, RequestState
from cloud_service_client.session.response import ResponseEnvelope
from cloud_service_client.transport.base_transport import BaseTransport


class RetryCoordinator:
    """
    Runs the sequential attempt loop of a request.

    Attributes:
        transport: Backend performing the actual I/O
        cookie_jar: Client-lifetime jar, or None when cookie handling is off
    """

    def __init__(self, transport: BaseTransport, cookie_jar: Optional[CookieStore] = None):
        self.transport = transport
        self.cookie_jar = cookie_jar

    async def execute(self, state: RequestState) -> Any:
        """
        Execute a request until the strategy chain stops retrying.

        Args:
            state: Request state; mutated in place (retry record, options)

        Returns:
            Raw transport response with ``cloud_client`` provenance attached

        Raises:
            The final transport error, with ``cloud_client`` attached
            Any error raised by a retry strategy hook
        """
        chain = RetryStrategyChain.from_options(state.client_options)
        attempts = 0

        while True:
            attempts += 1
            envelope, config = await self._attempt(state)

            retry_options = state.client_options.retry
            context = AttemptContext(
                attempts=attempts,
                max_attempts=retry_options.count,
                delay=retry_options.delay,
                delay_multiple=retry_options.delay_multiple,
                response=envelope.raw_response,
                url=config["url"],
                options=config,
                envelope=envelope,
            )
            try:
                decision = await chain.evaluate(envelope, context, state)
            except Exception as e:
                state.log_error("retry strategy failed. %s: %s", type(e).__name__, e)
                raise

            if not decision.should_retry:
                return self._finish(state, envelope, decision, attempts)

            state.add_retry(envelope.summary(), decision.delay_ms)
            if decision.extra_request_options:
                state.set_request_options(decision.extra_request_options)
                if CLIENT_OPTIONS_KEY in decision.extra_request_options:
                    chain = RetryStrategyChain.from_options(state.client_options)

            state.log_info(
                "retrying after %dms (strategy %s, attempt %d)",
                decision.delay_ms,
                decision.strategy.value if decision.strategy else "-",
                attempts,
            )
            await asyncio.sleep(decision.delay_ms / 1000)

    async def _attempt(self, state: RequestState) -> tuple[ResponseEnvelope, dict[str, Any]]:
        """Send one attempt; transport failures become envelopes, never exceptions."""
        if self.cookie_jar is not None:
            state.set_additional_cookies(self.cookie_jar.get_cookies(state.url))
        config = state.to_request_config()

        state.set_start_time()
        state.log_debug("> submitting request")

        raw_response: Any = None
        error: Optional[Exception] = None
        try:
            raw_response = await self.transport.submit(config)
        except Exception as e:
            error = e
            raw_response = self.transport.get_error_response(state, e)

        state.set_end_time()
        envelope = self.transport.create_envelope(raw_response, error)
        envelope.set_request_time(state.request_time)

        if error is None:
            state.log_info("< %s finished request", envelope.status)
        else:
            state.log_info("< ERR finished request. %s: %s", type(error).__name__, error)

        if self.cookie_jar is not None and raw_response is not None:
            set_cookies = self.transport.get_set_cookies(raw_response)
            if set_cookies:
                stored = self.cookie_jar.set_cookies(
                    set_cookies, self.transport.get_response_url(raw_response, state)
                )
                state.log_debug("stored %d of %d received cookies", stored, len(set_cookies))

        return envelope, config

    def _finish(
        self,
        state: RequestState,
        envelope: ResponseEnvelope,
        decision: RetryDecision,
        attempts: int,
    ) -> Any:
        if decision.outcome is RetryOutcome.EXHAUSTED:
            state.log_warning(
                "giving up after %d attempts (strategy %s)",
                attempts,
                decision.strategy.value if decision.strategy else "-",
            )
        return envelope.to_client_result({"options": state.to_json()})
