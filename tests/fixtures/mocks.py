"""
Mock services for testing the scan pipeline.

These mocks provide deterministic replies for testing without API calls.
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional

from tests.factories import analysis_reply, recipe_reply


class MockModelClient:
    """
    Mock ModelClient for testing pipeline behaviour.

    Replies are queued with queue_reply(); when the queue is empty, requests
    with images get a one-ingredient analysis reply and requests without
    images get a five-recipe reply. Set `gate` to an asyncio.Event to hold
    requests in flight until the test releases them.
    """

    def __init__(self):
        self.model = "claude-test-model"

        # Track calls for assertions
        self.calls: List[Dict] = []

        self._replies: List[str] = []
        self._raise_error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.cancelled = 0

    def queue_reply(self, text: str):
        """Queue raw reply text for the next request."""
        self._replies.append(text)

    def set_error(self, error: Exception):
        """Set an error to raise on the next request."""
        self._raise_error = error

    def reset(self):
        """Reset recorded calls and configured replies."""
        self.calls = []
        self._replies = []
        self._raise_error = None

    async def send(self, prompt, images=None, *, api_key, max_tokens) -> str:
        self.calls.append(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "prompt": prompt,
                "images": list(images or []),
                "api_key": api_key,
                "max_tokens": max_tokens,
            }
        )

        if self.gate is not None:
            try:
                await self.gate.wait()
            except asyncio.CancelledError:
                self.cancelled += 1
                raise

        if self._raise_error:
            error = self._raise_error
            self._raise_error = None
            raise error

        if self._replies:
            return self._replies.pop(0)
        return analysis_reply() if images else recipe_reply()

    async def check_api_key(self, api_key: str) -> bool:
        self.calls.append({"prompt": "test", "api_key": api_key})
        return bool(api_key)
