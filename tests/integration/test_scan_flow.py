"""
End-to-end scan flow.

Runs ScanPipeline with the real ModelClient and Anthropic SDK over an
httpx.MockTransport, persisting into the in-memory SQLite store.
"""
import json

import httpx
import pytest
from anthropic import AsyncAnthropic
from sqlalchemy.orm import Session

from fridgecheck.models import PantryItem, Recipe, ScanRecord
from fridgecheck.services.exceptions import HTTPError, NetworkError
from fridgecheck.services.model_client import ModelClient
from fridgecheck.services.scan_pipeline import ScanPipeline
from fridgecheck.services.scan_state import (
    AnalysisFailed,
    Analyzed,
    Generated,
    GenerationFailed,
    Idle,
)
from tests.factories import analysis_reply, create_image, ingredient_payload, recipe_reply

API_KEY = "sk-ant-integration"


def message_json(text):
    return {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "model": "claude-test",
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 100, "output_tokens": 50},
    }


class FakeMessagesAPI:
    """
    Scripted /v1/messages endpoint.

    Each entry in `responses` is either reply text (200), an
    (status, body) tuple, or an exception to raise from the transport.
    """

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, tuple):
            status, body = response
            return httpx.Response(status, content=body.encode())
        return httpx.Response(200, json=message_json(response))

    def client(self) -> ModelClient:
        def factory(api_key):
            return AsyncAnthropic(
                api_key=api_key,
                base_url="https://api.anthropic.com",
                http_client=httpx.AsyncClient(transport=httpx.MockTransport(self.handler)),
                max_retries=0,
            )

        return ModelClient(model="claude-test", client_factory=factory)


class TestScanFlow:
    @pytest.mark.asyncio
    async def test_milk_photo_to_saved_recipe(self, store, db: Session):
        api = FakeMessagesAPI(
            [
                analysis_reply([ingredient_payload("Milk", "Dairy", "1 carton")], fenced=True),
                recipe_reply(),
            ]
        )
        pipeline = ScanPipeline(client=api.client(), store=store)

        pipeline.capture_images([create_image(3000, 4000)])
        state = await pipeline.start_analysis(API_KEY)

        assert isinstance(state, Analyzed)
        milk = state.ingredients[0]
        assert (milk.name, milk.category.value, milk.estimated_quantity) == (
            "Milk",
            "Dairy",
            "1 carton",
        )
        assert milk.is_selected

        content = api.requests[0]["messages"][0]["content"]
        assert [block["type"] for block in content] == ["image", "text"]
        assert content[0]["source"]["media_type"] == "image/jpeg"
        assert api.requests[0]["max_tokens"] == 2048

        state = await pipeline.start_generation(api_key=API_KEY)

        assert isinstance(state, Generated)
        assert len(state.recipes) == 5
        prompt = api.requests[1]["messages"][0]["content"]
        assert prompt.startswith("I have these ingredients available: Milk.")
        assert "Serving size: 2 people." in prompt
        assert api.requests[1]["max_tokens"] == 4096

        pipeline.commit_selected_to_pantry()
        assert pipeline.save_recipe(state.recipes[0]) is True
        assert pipeline.save_recipe(state.recipes[0]) is False
        assert pipeline.save_scan_record() is True

        assert [item.name for item in db.query(PantryItem).all()] == ["Milk"]
        recipe = db.query(Recipe).one()
        assert recipe.title == "Recipe 1"
        assert recipe.source_ingredients == ["Milk"]
        record = db.query(ScanRecord).one()
        assert record.detected_ingredients == ["Milk"]
        assert len(record.recipes) == 5
        assert len(record.images) == 1

        pipeline.reset()
        assert isinstance(pipeline.state, Idle)
        assert pipeline.recipes == ()

    @pytest.mark.asyncio
    async def test_rejected_key_then_retry(self, store):
        error_body = '{"type":"error","error":{"type":"authentication_error","message":"invalid x-api-key"}}'
        api = FakeMessagesAPI([(401, error_body), analysis_reply()])
        pipeline = ScanPipeline(client=api.client(), store=store)
        pipeline.capture_images([create_image()])

        state = await pipeline.start_analysis("sk-ant-wrong")

        assert isinstance(state, AnalysisFailed)
        assert isinstance(state.error, HTTPError)
        assert state.error.status == 401
        assert state.error.body == error_body

        state = await pipeline.start_analysis(API_KEY)

        assert isinstance(state, Analyzed)
        assert len(api.requests) == 2

    @pytest.mark.asyncio
    async def test_network_failure_during_generation(self, store):
        api = FakeMessagesAPI([analysis_reply(), httpx.ConnectError("connection refused")])
        pipeline = ScanPipeline(client=api.client(), store=store)
        pipeline.capture_images([create_image()])
        await pipeline.start_analysis(API_KEY)

        state = await pipeline.start_generation(api_key=API_KEY)

        assert isinstance(state, GenerationFailed)
        assert isinstance(state.error, NetworkError)
        assert pipeline.error_message.startswith("Network error:")
        assert len(pipeline.ingredients) == 1

    @pytest.mark.asyncio
    async def test_unparseable_reply(self, store):
        api = FakeMessagesAPI(["I see a fridge but no food."])
        pipeline = ScanPipeline(client=api.client(), store=store)
        pipeline.capture_images([create_image()])

        state = await pipeline.start_analysis(API_KEY)

        assert isinstance(state, AnalysisFailed)
        assert pipeline.error_message.startswith("Failed to parse response:")
