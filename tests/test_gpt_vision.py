from types import SimpleNamespace

import httpx
import openai
import pytest

from dishlingo.gpt_vision import InferenceError, OpenAIGateway


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.mark.asyncio
async def test_image_request_shape_and_trimmed_text():
    completions = FakeCompletions(content="  YES \n")
    gateway = OpenAIGateway(client=fake_client(completions), model="gpt-4o")

    text = await gateway.complete("Is it a menu?", "data:image/png;base64,AAAA", max_tokens=10)

    assert text == "YES"
    assert completions.kwargs["model"] == "gpt-4o"
    assert completions.kwargs["max_tokens"] == 10
    content = completions.kwargs["messages"][0]["content"]
    assert content[0] == {"type": "text", "text": "Is it a menu?"}
    assert content[1]["image_url"]["url"] == "data:image/png;base64,AAAA"


@pytest.mark.asyncio
async def test_text_only_request():
    completions = FakeCompletions(content=None)
    gateway = OpenAIGateway(client=fake_client(completions), model="gpt-4o")

    assert await gateway.complete("hello") == ""
    assert completions.kwargs["messages"] == [{"role": "user", "content": "hello"}]


@pytest.mark.asyncio
async def test_sdk_errors_become_inference_errors():
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    completions = FakeCompletions(error=openai.APIConnectionError(request=request))
    gateway = OpenAIGateway(client=fake_client(completions), model="gpt-4o")

    with pytest.raises(InferenceError):
        await gateway.complete("hello")
