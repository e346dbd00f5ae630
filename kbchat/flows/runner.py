"""High-level entry point for the chat REPL."""

from __future__ import annotations

from typing import Optional

from kbchat.domain.conversation import ConversationHistory
from kbchat.flows.graph import ChatContext, build_graph
from kbchat.flows.state import ChatState, RunState
from kbchat.infrastructure.logging.logger import logger
from kbchat.knowledge.catalog import ActiveKnowledge


def initial_state(
    run: Optional[RunState] = None,
    *,
    history: Optional[ConversationHistory] = None,
    knowledge: Optional[ActiveKnowledge] = None,
) -> ChatState:
    return {
        "run": run or RunState(),
        "history": history if history is not None else ConversationHistory(),
        "knowledge": knowledge or ActiveKnowledge.empty(),
        "user_input": None,
        "route": None,
        "stop_reason": None,
        "read_errors": 0,
        "last_error": None,
    }


def run_chat(ctx: ChatContext, state: Optional[ChatState] = None) -> int:
    """Run the REPL until it stops and return the process exit status.

    Args:
        ctx: 终端、Provider 与知识源等协作者
        state: 初始状态；其中的 RunState 可以被信号处理函数共享
    """

    state = state if state is not None else initial_state()
    graph = build_graph(ctx)
    logger.info("chat.start", extra={"extra": {"provider": ctx.provider_name, "model": ctx.model_name}})
    while state["run"].running:
        state = graph.invoke(state)
    logger.info(
        "chat.end",
        extra={"extra": {"reason": state["run"].reason, "history": len(state["history"])}},
    )
    return 0
