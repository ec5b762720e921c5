"""
Endpoint testing core logic for the athlete endpoint fuzzing framework
"""

import asyncio
import json
import logging
import time
from typing import Any, Optional

import aiohttp

from athlete_fuzz.config import EndpointConfig
from athlete_fuzz.models import AthleteInput, TestResult

logger = logging.getLogger(__name__)

# Status recorded when the transport produced no response at all
TRANSPORT_ERROR_STATUS = 500


class EndpointTester:
    """Send athlete inputs to the endpoint and record the outcome"""

    def __init__(self, config: EndpointConfig):
        self.config = config
        self.base_url = config.base_url
        self.session: Optional[aiohttp.ClientSession] = None

    async def connect(self):
        """Open the HTTP session"""
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        self.session = aiohttp.ClientSession(timeout=timeout)

    async def disconnect(self):
        """Close the HTTP session"""
        if self.session:
            await self.session.close()
            self.session = None

    async def __aenter__(self) -> "EndpointTester":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.disconnect()

    async def run_test(self, test_id: str, test_input: AthleteInput) -> TestResult:
        """POST one input and turn whatever happens into a TestResult"""
        if self.session is None:
            raise RuntimeError("EndpointTester.connect() must be called before run_test()")

        payload = test_input.to_payload()
        start_time = time.perf_counter()

        try:
            async with self.session.post(self.base_url, json=payload) as response:
                status = response.status
                data = await self._read_body(response)
            success = 200 <= status < 300
            error = None if success else f"HTTP {status}"
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            status = TRANSPORT_ERROR_STATUS
            data = None
            success = False
            error = str(e) or type(e).__name__
            logger.debug(f"{test_id} transport error: {error}")

        elapsed_ms = (time.perf_counter() - start_time) * 1000

        return TestResult(
            test_id=test_id,
            test_input=test_input,
            success=success,
            status=status,
            data=data,
            elapsed_ms=elapsed_ms,
            error=error,
        )

    async def _read_body(self, response: aiohttp.ClientResponse) -> Any:
        """Decode the body as JSON when possible, otherwise keep the text"""
        text = await response.text(errors='replace')
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text
