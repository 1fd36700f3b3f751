import pytest

from agent.chat_agent import (
    CHAT_FAILURE_TEXT,
    ChatBusyError,
    ChatSession,
    format_response_text,
    start_chat_session,
)


def test_format_response_text_bullets_and_asterisks():
    text = "Try this:\n- Check the valve\n* Replace the **washer**"
    assert format_response_text(text) == "Try this:\n• Check the valve\n• Replace the washer"


def test_chat_disabled_without_credential(mock_mode):
    assert start_chat_session("Problem: leaking sink") is None


def test_chat_session_embeds_context(live_mode, fake_client):
    session = start_chat_session("Problem: leaking sink", client=fake_client())

    assert session is not None
    assert session.history[0]["role"] == "system"
    assert "Problem: leaking sink" in session.history[0]["content"]
    assert session.messages == []


async def test_stream_appends_chunks_in_order(fake_client):
    client = fake_client(chunks=["You can ", "use **plumber's** tape", "."])
    session = ChatSession(client, "system prompt", model="test-model")

    received = [chunk async for chunk in session.send_message_stream("  What about tape?  ")]

    assert received == ["You can ", "use **plumber's** tape", "."]
    user, reply = session.messages
    assert user.sender == "user" and user.text == "What about tape?"
    assert reply.sender == "ai"
    assert reply.text == "You can use plumber's tape."
    assert reply.is_loading is False
    assert session.history[-1] == {"role": "assistant", "content": "You can use **plumber's** tape."}
    assert client.calls[0]["stream"] is True
    assert client.calls[0]["model"] == "test-model"


async def test_stream_failure_sets_apology(fake_client):
    client = fake_client(error=RuntimeError("connection reset"))
    session = ChatSession(client, "system prompt")

    received = [chunk async for chunk in session.send_message_stream("Hello?")]

    assert received == []
    assert session.messages[-1].text == CHAT_FAILURE_TEXT
    assert session.messages[-1].is_loading is False
    assert session.is_sending is False
    assert [turn["role"] for turn in session.history] == ["system"]


async def test_second_message_while_streaming_is_rejected(fake_client):
    session = ChatSession(fake_client(chunks=["one", "two"]), "system prompt")

    stream = session.send_message_stream("first")
    first_chunk = await stream.__anext__()
    assert first_chunk == "one"

    with pytest.raises(ChatBusyError):
        async for _ in session.send_message_stream("second"):
            pass

    rest = [chunk async for chunk in stream]
    assert rest == ["two"]
    assert session.is_sending is False


async def test_blank_message_rejected(fake_client):
    session = ChatSession(fake_client(), "system prompt")
    with pytest.raises(ValueError):
        async for _ in session.send_message_stream("   "):
            pass
    assert session.messages == []


async def test_failure_mid_stream_keeps_chunks_then_apologises(fake_client):
    client = fake_client(chunks=["Turn off ", "the water"], stream_error=RuntimeError("connection reset"))
    session = ChatSession(client, "system prompt")

    received = [chunk async for chunk in session.send_message_stream("Where do I start?")]

    assert received == ["Turn off ", "the water"]
    user, reply = session.messages
    assert user.text == "Where do I start?"
    assert reply.text == CHAT_FAILURE_TEXT
    assert reply.is_loading is False
    assert [turn["role"] for turn in session.history] == ["system"]
    assert session.is_sending is False


async def test_abandoned_stream_is_finalized(fake_client):
    session = ChatSession(fake_client(chunks=["one", "two"]), "system prompt")

    stream = session.send_message_stream("first")
    assert await stream.__anext__() == "one"
    await stream.aclose()

    reply = session.messages[-1]
    assert reply.text == CHAT_FAILURE_TEXT
    assert reply.is_loading is False
    assert [turn["role"] for turn in session.history] == ["system"]
    assert session.is_sending is False

    received = [chunk async for chunk in session.send_message_stream("second")]
    assert received == ["one", "two"]


def test_reserve_is_exclusive(fake_client):
    session = ChatSession(fake_client(), "system prompt")

    session.reserve()
    with pytest.raises(ChatBusyError):
        session.reserve()
    assert session.is_sending is True
