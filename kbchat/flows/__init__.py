"""Chat REPL state machine built on LangGraph."""

from .graph import ChatContext, build_graph
from .runner import initial_state, run_chat
from .state import ChatState, RunState

__all__ = ["ChatContext", "ChatState", "RunState", "build_graph", "initial_state", "run_chat"]
