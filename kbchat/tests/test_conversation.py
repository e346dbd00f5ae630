import dataclasses

import pytest

from kbchat.domain.conversation import ConversationHistory
from kbchat.domain.models import ChatMessage


def test_history_append_and_clear():
    history = ConversationHistory()
    for i in range(3):
        history.add_user(f"q{i}")
        history.add_assistant(f"a{i}")
    assert len(history) == 6
    assert [m.role for m in history][:2] == ["user", "assistant"]
    history.clear()
    assert len(history) == 0


def test_history_rejects_system_messages():
    history = ConversationHistory()
    with pytest.raises(ValueError):
        history.append(ChatMessage(role="system", content="x"))
    assert len(history) == 0


def test_messages_returns_copy():
    history = ConversationHistory([ChatMessage(role="user", content="hi")])
    snapshot = history.messages()
    snapshot.append(ChatMessage(role="assistant", content="extra"))
    assert len(history) == 1


def test_chat_message_is_immutable():
    msg = ChatMessage(role="user", content="hi")
    with pytest.raises(dataclasses.FrozenInstanceError):
        msg.content = "changed"
