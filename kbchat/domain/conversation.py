from typing import Iterable, Iterator, List, Optional

from .models import ChatMessage


HISTORY_ROLES = ("user", "assistant")


class ConversationHistory:
    """进程内的对话历史，按时间顺序保存 user/assistant 消息。

    不做裁剪也不落盘；只能整条追加或整体清空。
    """

    def __init__(self, messages: Optional[Iterable[ChatMessage]] = None):
        self._messages: List[ChatMessage] = []
        for message in messages or ():
            self.append(message)

    def append(self, message: ChatMessage) -> None:
        if message.role not in HISTORY_ROLES:
            raise ValueError(f"history only holds user/assistant messages, got {message.role!r}")
        self._messages.append(message)

    def add_user(self, content: str) -> ChatMessage:
        message = ChatMessage(role="user", content=content)
        self.append(message)
        return message

    def add_assistant(self, content: str) -> ChatMessage:
        message = ChatMessage(role="assistant", content=content)
        self.append(message)
        return message

    def clear(self) -> None:
        self._messages.clear()

    def messages(self) -> List[ChatMessage]:
        """返回历史的浅拷贝，调用方修改列表不会影响历史。"""

        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(list(self._messages))
