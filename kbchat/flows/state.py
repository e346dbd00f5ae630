"""State definition for the chat REPL graph."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TypedDict

from kbchat.domain.conversation import ConversationHistory
from kbchat.knowledge.catalog import ActiveKnowledge


@dataclass
class RunState:
    """“继续运行”标志。

    同一个实例既在每轮状态里传递，也被 SIGINT 处理函数持有；
    循环在读输入前、读输入后以及逐字输出时检查它。
    """

    running: bool = True
    reason: Optional[str] = None

    def stop(self, reason: str) -> None:
        if self.running:
            self.running = False
            self.reason = reason


class ChatState(TypedDict, total=False):
    """State shared across graph nodes for one REPL turn."""

    run: RunState
    history: ConversationHistory
    knowledge: ActiveKnowledge
    user_input: Optional[str]
    route: Optional[str]
    stop_reason: Optional[str]
    read_errors: int
    last_error: Optional[str]
