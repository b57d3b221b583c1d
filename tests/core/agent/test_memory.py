import pytest

from cordai.core.agent import ThreadMemory
from cordai.types import Attachment, MessageRole


@pytest.mark.asyncio
async def test_history_is_bounded_to_most_recent():
    memory = ThreadMemory(max_history_messages=3)
    for i in range(5):
        await memory.add_message("t1", "u1", MessageRole.USER, f"m{i}")

    assert [m.content for m in memory.history("t1", "u1")] == ["m2", "m3", "m4"]
    assert len(memory.messages("t1", "u1")) == 5


@pytest.mark.asyncio
async def test_threads_are_isolated_and_scoped():
    memory = ThreadMemory()
    await memory.add_message("t1", "u1", MessageRole.USER, "hello", [Attachment(url="https://x/a.png", content_type="image/png")])
    await memory.add_message("t2", "u2", MessageRole.USER, "other")

    context = memory.get("t1", "u1")
    assert context.resource_id == "u1"
    assert context.messages[0].attachments[0].content_type == "image/png"
    assert [m.content for m in memory.messages("t2", "u2")] == ["other"]
    assert memory.messages("unknown", "u1") == []
    assert memory.get("unknown", "u1") is None


@pytest.mark.asyncio
async def test_thread_id_is_scoped_by_resource():
    memory = ThreadMemory()
    await memory.add_message("t1", "alice", MessageRole.USER, "alice only")

    assert memory.messages("t1", "bob") == []
    assert memory.history("t1", "bob") == []
    assert memory.messages("t1") == []
    assert memory.get("t1", "bob") is None


@pytest.mark.parametrize("kwargs", [{"max_history_messages": 0}, {"max_threads": 0}, {"max_history_messages": -1}])
def test_non_positive_bounds_are_rejected(kwargs):
    with pytest.raises(ValueError):
        ThreadMemory(**kwargs)


@pytest.mark.asyncio
async def test_least_recently_updated_thread_is_evicted():
    memory = ThreadMemory(max_threads=2)
    await memory.add_message("t1", "u1", MessageRole.USER, "one")
    await memory.add_message("t2", "u1", MessageRole.USER, "two")
    await memory.add_message("t1", "u1", MessageRole.USER, "one again")

    await memory.add_message("t3", "u1", MessageRole.USER, "three")

    assert memory.get("t2", "u1") is None
    assert [m.content for m in memory.messages("t1", "u1")] == ["one", "one again"]
    assert [m.content for m in memory.messages("t3", "u1")] == ["three"]


def test_thread_message_serialises_camel_case():
    from cordai.core.agent import ThreadMessage

    dumped = ThreadMessage(role=MessageRole.ASSISTANT, content="hi").model_dump(mode="json", by_alias=True)

    assert dumped["role"] == "assistant"
    assert "createdAt" in dumped
