import asyncio
from typing import List, Optional

import pytest

from unixora.assistant.models.chat import MessageType, QueryResponse, Source
from unixora.assistant.services.conversation_controller import (
    BANNER_ERROR, ERROR_REPLY, ConversationController, ConversationState, render_message
)
from unixora.assistant.services.query_client import QueryServiceError
from unixora.client import NotAuthenticatedError


class FakeQueryClient:
    """Stands in for QueryServiceClient; optionally blocks until released."""

    def __init__(self, response: Optional[QueryResponse] = None, error: Optional[Exception] = None):
        self.response = response or QueryResponse(answer="**Imperial** is a good fit.")
        self.error = error
        self.gate: Optional[asyncio.Event] = None
        self.calls: List[str] = []

    async def query(self, text: str) -> QueryResponse:
        self.calls.append(text)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


async def wait_until_awaiting(controller: ConversationController) -> None:
    for _ in range(10):
        if controller.state is ConversationState.AWAITING_RESPONSE:
            return
        await asyncio.sleep(0)
    raise AssertionError("controller never started awaiting")


def test_greeting_uses_profile_first_name(context):
    controller = ConversationController(FakeQueryClient(), context)
    greeting = controller.messages[0]
    assert greeting.type is MessageType.BOT
    assert greeting.text == "Good Morning, Ada!"
    assert greeting.subtext == "I am ready to help you"


def test_controller_requires_logged_in_profile(anonymous_context):
    with pytest.raises(NotAuthenticatedError):
        ConversationController(FakeQueryClient(), anonymous_context)


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
async def test_blank_submit_changes_nothing(context, text):
    client = FakeQueryClient()
    controller = ConversationController(client, context)
    before = controller.messages

    assert await controller.submit(text) is False
    assert controller.messages == before
    assert controller.sessions == []
    assert controller.state is ConversationState.IDLE
    assert client.calls == []


@pytest.mark.asyncio
async def test_successful_query_appends_answer(context):
    response = QueryResponse(
        answer="Try UCL.",
        sources=[Source(university="UCL", program="MSc AI", text="UCL offers...")],
        confidence=0.82,
        tavily_used=False
    )
    client = FakeQueryClient(response=response)
    controller = ConversationController(client, context)

    assert await controller.submit("AI programs in London") is True

    user, bot = controller.messages[1:]
    assert user.type is MessageType.USER and user.text == "AI programs in London"
    assert bot.type is MessageType.BOT
    assert bot.text == "Try UCL."
    assert bot.sources[0].program == "MSc AI"
    assert bot.confidence == pytest.approx(0.82)
    assert not bot.is_error
    assert controller.state is ConversationState.IDLE
    assert controller.error is None
    assert client.calls == ["AI programs in London"]


@pytest.mark.asyncio
async def test_failed_query_adds_error_message_and_banner(context):
    controller = ConversationController(FakeQueryClient(error=QueryServiceError("API error: 500", 500)), context)

    await controller.submit("AI programs in London")

    assert [s.title for s in controller.sessions] == ["AI programs in London"]
    user_messages = [m for m in controller.messages if m.type is MessageType.USER]
    assert len(user_messages) == 1
    error_message = controller.messages[-1]
    assert error_message.type is MessageType.BOT
    assert error_message.is_error is True
    assert error_message.text == ERROR_REPLY
    assert controller.error == BANNER_ERROR
    assert controller.state is ConversationState.IDLE


@pytest.mark.asyncio
async def test_banner_is_cleared_by_next_submit_or_dismiss(context):
    client = FakeQueryClient(error=QueryServiceError("down"))
    controller = ConversationController(client, context)
    await controller.submit("first")
    message_count = len(controller.messages)

    controller.dismiss_error()
    assert controller.error is None
    assert len(controller.messages) == message_count

    await controller.submit("second")
    assert controller.error == BANNER_ERROR
    client.error = None
    await controller.submit("third")
    assert controller.error is None
    assert controller.messages[-1].text == client.response.answer


@pytest.mark.asyncio
async def test_second_submit_while_awaiting_is_dropped(context):
    client = FakeQueryClient()
    client.gate = asyncio.Event()
    controller = ConversationController(client, context)

    first = asyncio.create_task(controller.submit("first"))
    await wait_until_awaiting(controller)
    count = len(controller.messages)

    assert await controller.submit("second") is False
    assert len(controller.messages) == count
    assert controller.is_loading

    client.gate.set()
    assert await first is True
    assert len(controller.messages) == count + 1
    assert client.calls == ["first"]
    assert controller.state is ConversationState.IDLE


@pytest.mark.asyncio
async def test_new_chat_discards_stale_response(context):
    client = FakeQueryClient()
    client.gate = asyncio.Event()
    controller = ConversationController(client, context)

    pending = asyncio.create_task(controller.submit("first"))
    await wait_until_awaiting(controller)

    controller.new_chat()
    assert controller.state is ConversationState.IDLE
    client.gate.set()
    await pending

    assert controller.messages == [controller.greeting()]
    assert controller.error is None


@pytest.mark.asyncio
async def test_loading_session_discards_stale_failure(context):
    client = FakeQueryClient()
    controller = ConversationController(client, context)
    await controller.submit("older chat")
    older_id = controller.active_session_id
    controller.new_chat()

    client.gate = asyncio.Event()
    client.error = QueryServiceError("down")
    pending = asyncio.create_task(controller.submit("newer chat"))
    await wait_until_awaiting(controller)

    assert controller.load_session(older_id) is True
    client.gate.set()
    await pending

    assert controller.error is None
    assert not any(m.is_error for m in controller.messages)
    assert [m.text for m in controller.messages][-1] == "older chat"


@pytest.mark.asyncio
async def test_load_unknown_session_leaves_state_unchanged(context):
    controller = ConversationController(FakeQueryClient(), context)
    await controller.submit("hello")
    before = (controller.messages, controller.active_session_id)

    assert controller.load_session(12345) is False
    assert (controller.messages, controller.active_session_id) == before


@pytest.mark.asyncio
async def test_delete_active_session_returns_to_greeting(context):
    controller = ConversationController(FakeQueryClient(), context)
    await controller.submit("hello")

    assert controller.delete_session(controller.active_session_id) is True
    assert controller.messages == [controller.greeting()]
    assert controller.sessions == []


@pytest.mark.asyncio
async def test_eleven_chats_keep_ten_in_history(context):
    controller = ConversationController(FakeQueryClient(), context)
    for i in range(11):
        await controller.submit(f"chat {i}")
        controller.new_chat()

    assert len(controller.sessions) == 10
    assert controller.sessions[0].title == "chat 10"
    assert "chat 0" not in [s.title for s in controller.sessions]


@pytest.mark.asyncio
async def test_render_message_formats_bot_and_escapes_user(context):
    controller = ConversationController(FakeQueryClient(), context)
    await controller.submit("<b>hi</b>")
    user, bot = controller.messages[1:]

    assert render_message(user) == "&lt;b&gt;hi&lt;/b&gt;"
    assert render_message(bot) == "<p><strong>Imperial</strong> is a good fit.</p>"
