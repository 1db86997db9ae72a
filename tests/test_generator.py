import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage
from tenacity import wait_none

from codegen.generator import ArtifactGenerator, ArtifactKind
from codegen.llm import GenerationError, LLMClient

from conftest import REACT_OK, RecordingClient


class ExplodingModel:
    """Minimal chat model stand-in that fails every call."""

    def __init__(self):
        self.calls = 0

    def invoke(self, messages):
        self.calls += 1
        raise ConnectionError("groq unreachable")


class BlockModel:
    def invoke(self, messages):
        return AIMessage(content=[{"type": "text", "text": "part one "}, {"type": "text", "text": "part two"}])


def test_generate_strips_fences(spec):
    generator = ArtifactGenerator(RecordingClient([f"```tsx\n{REACT_OK}\n```"]))
    assert generator.generate(ArtifactKind.REACT_COMPONENT, spec) == REACT_OK


def test_missing_sibling_is_rejected_before_any_call(spec):
    client = RecordingClient([])
    generator = ArtifactGenerator(client)
    with pytest.raises(ValueError, match="react_component"):
        generator.generate(ArtifactKind.STYLESHEET, spec, siblings={})
    assert client.messages == []


def test_feedback_and_siblings_reach_the_prompt(spec):
    client = RecordingClient(["body { }"])
    generator = ArtifactGenerator(client)
    generator.generate(
        ArtifactKind.STYLESHEET,
        spec,
        siblings={ArtifactKind.REACT_COMPONENT: REACT_OK},
        feedback="1. Missing typography inheritance",
    )
    user_prompt = client.messages[0][-1]["content"]
    assert "1. Missing typography inheritance" in user_prompt
    assert "wf-pricingcard-title" in user_prompt


def test_prompts_carry_the_component_contract(spec):
    client = RecordingClient(["x"])
    ArtifactGenerator(client).generate(ArtifactKind.REACT_COMPONENT, spec)
    text = "\n".join(m["content"] for m in client.messages[0])
    assert "PricingCard" in text
    assert "wf-pricingcard" in text
    assert "title" in text


def test_empty_reply_is_retried():
    llm = FakeListChatModel(responses=["", "export default function A() {}"])
    client = LLMClient(llm=llm, max_attempts=2, wait=wait_none())
    assert client.complete([{"role": "user", "content": "hi"}]) == "export default function A() {}"


def test_exhausted_retries_raise_generation_error():
    model = ExplodingModel()
    client = LLMClient(llm=model, max_attempts=3, wait=wait_none())
    with pytest.raises(GenerationError) as info:
        client.complete([{"role": "user", "content": "hi"}], step="generate_react_component")
    assert model.calls == 3
    assert info.value.attempts == 3
    assert info.value.step == "generate_react_component"
    assert isinstance(info.value.cause, ConnectionError)


def test_content_blocks_are_joined():
    client = LLMClient(llm=BlockModel(), max_attempts=1, wait=wait_none())
    assert client.complete([{"role": "user", "content": "hi"}]) == "part one part two"
