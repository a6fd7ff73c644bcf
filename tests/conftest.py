import json

import pytest

from dishlingo.gpt_vision import InferenceError, InferenceGateway
from dishlingo.prompts import (
    EXTRACTION_PROMPT,
    SELF_TEST_PROMPT,
    VALIDATION_PROMPT,
)


def prompt_kind(prompt: str) -> str:
    if prompt == VALIDATION_PROMPT:
        return "validate"
    if prompt == EXTRACTION_PROMPT:
        return "extract"
    if prompt == SELF_TEST_PROMPT:
        return "self_test"
    if "pronunciation" in prompt:
        return "pronounce"
    if "allergens" in prompt:
        return "allergens"
    raise AssertionError(f"Unexpected prompt: {prompt[:60]}")


class FakeGateway(InferenceGateway):
    """
    Scripted gateway. `script` maps a prompt kind to either a reply, an
    exception instance, or a dict keyed by image giving per-image replies.
    """

    def __init__(self, **script):
        self.script = script
        self.calls = []

    async def complete(self, prompt, image=None, *, max_tokens=1000, temperature=0.0):
        kind = prompt_kind(prompt)
        self.calls.append((kind, image, prompt))
        reply = self.script.get(kind, "")
        if isinstance(reply, dict):
            reply = reply.get(image, "")
        if isinstance(reply, Exception):
            raise reply
        return reply

    def kinds(self):
        return [kind for kind, _, _ in self.calls]


def dish_json(name, description=None, nutrition=None):
    return {
        "original_name": name,
        "simple_description": description
        or f"This is a dish. {name} is tasty. It is popular. Top ingredients: salt, pepper, oil",
        "nutrition": nutrition or {"calories": "High", "sugar": "Low", "unhealthy_fat": "Medium"},
    }


def dishes_reply(*names, fenced=False):
    text = json.dumps([dish_json(name) for name in names])
    return f"```json\n{text}\n```" if fenced else text


@pytest.fixture
def transport_error():
    return InferenceError("OpenAI processing failed: Connection error.")
