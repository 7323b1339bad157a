"""
Claude Messages API client used by the scan pipeline.

One send() is one POST to /v1/messages. The API key is supplied per call by
the caller and never stored. SDK-level retries are disabled: retrying is a
caller decision (the pipeline leaves it to the user).
"""

import logging
from typing import Callable, Optional, Sequence

import anthropic
import httpx
from anthropic import AsyncAnthropic

from fridgecheck.config import settings
from fridgecheck.services.exceptions import (
    HTTPError,
    MalformedResponseError,
    NetworkError,
    NoAPIKeyError,
)
from fridgecheck.services.image_service import PreparedImage
from fridgecheck.services.prompts import API_KEY_CHECK_PROMPT

logger = logging.getLogger(__name__)


def build_user_content(
    prompt: str, images: Optional[Sequence[PreparedImage]] = None
) -> str | list[dict]:
    """
    Build the content of the single user message.

    With images: one image block per image, then the prompt as a text block.
    Without images: the prompt string alone.
    """
    if not images:
        return prompt

    content = [
        {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": image.media_type,
                "data": image.base64_data,
            },
        }
        for image in images
    ]
    content.append({"type": "text", "text": prompt})
    return content


class ModelClient:
    """Sends prompts (optionally with images) to Claude and returns the reply text."""

    def __init__(
        self,
        model: Optional[str] = None,
        client_factory: Optional[Callable[[str], AsyncAnthropic]] = None,
    ):
        self.model = model or settings.model
        self._client_factory = client_factory or self._default_client

    @staticmethod
    def _default_client(api_key: str) -> AsyncAnthropic:
        timeout = httpx.Timeout(
            timeout=settings.anthropic_timeout,
            connect=settings.anthropic_connect_timeout,
        )
        return AsyncAnthropic(
            api_key=api_key,
            base_url=settings.anthropic_base_url,
            timeout=timeout,
            max_retries=0,
        )

    async def send(
        self,
        prompt: str,
        images: Optional[Sequence[PreparedImage]] = None,
        *,
        api_key: str,
        max_tokens: int,
    ) -> str:
        """
        Send one user message and return content[0].text.

        Args:
            prompt: Prompt text
            images: Prepared JPEG images to attach before the prompt
            api_key: Anthropic API key (x-api-key header)
            max_tokens: Output token budget

        Returns:
            Raw reply text

        Raises:
            NoAPIKeyError: Empty key, no request is made
            NetworkError: Connection failure or timeout
            HTTPError: Non-2xx status (body kept verbatim)
            MalformedResponseError: 2xx without content[0].text
        """
        if not api_key or not api_key.strip():
            logger.error("No API key set")
            raise NoAPIKeyError()

        messages = [{"role": "user", "content": build_user_content(prompt, images)}]
        client = self._client_factory(api_key)

        try:
            response = await client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=messages,
            )
        except anthropic.APIConnectionError as e:
            # Also covers APITimeoutError
            logger.error("Network error: %s", e)
            raise NetworkError(e) from e
        except anthropic.APIStatusError as e:
            body = e.response.text
            logger.error("API error (%d): %s", e.status_code, body)
            raise HTTPError(e.status_code, body) from e
        except anthropic.APIResponseValidationError as e:
            logger.error("Unexpected response envelope: %s", e)
            raise MalformedResponseError() from e
        finally:
            await client.close()

        text = _first_text(response)
        logger.debug("Raw API response text: %s", text)
        return text

    async def check_api_key(self, api_key: str) -> bool:
        """
        Send a one-token request to see whether a key is accepted.

        Returns:
            True on any 2xx reply, False on HTTP or network failure

        Raises:
            NoAPIKeyError: Key is empty after trimming whitespace
        """
        key = (api_key or "").strip()
        if not key:
            raise NoAPIKeyError()

        try:
            await self.send(API_KEY_CHECK_PROMPT, api_key=key, max_tokens=1)
        except (HTTPError, NetworkError) as e:
            logger.warning("API key check failed: %s", e.message)
            return False
        except MalformedResponseError:
            # The endpoint accepted the key; only the reply shape was odd
            return True
        return True


def _first_text(response) -> str:
    content = getattr(response, "content", None)
    if not content:
        raise MalformedResponseError()
    text = getattr(content[0], "text", None)
    if not isinstance(text, str):
        raise MalformedResponseError()
    return text
