"""LangGraph construction and node implementations for one REPL turn.

Each invocation walks ``read`` -> one of ``clear`` / ``select_knowledge`` /
``query`` / ``stop`` -> END. The runner keeps invoking the graph until the
run flag is cleared.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from uuid import uuid4

from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from kbchat.console.base import ChatConsole
from kbchat.domain.exceptions import InputError, KnowledgeLoadError, RemoteCallError
from kbchat.flows.state import ChatState
from kbchat.infrastructure.logging.logger import logger
from kbchat.knowledge.catalog import KnowledgeCatalog
from kbchat.prompts import build_request
from kbchat.providers.base import ProviderClient

INPUT_PROMPT = "Please enter some text and press Enter: "
SELECT_PROMPT = "Select a knowledge source by index: "
BUSY_MESSAGE = "💡 Asking..."

EXIT_COMMAND = "exit"
CLEAR_COMMAND = "clear"
KNOWLEDGE_COMMAND = "knowledge"

# 连续读取失败达到该次数后视为不可恢复，直接退出
MAX_READ_ERRORS = 3


@dataclass
class ChatContext:
    """Collaborators the nodes need; bound into the graph at build time."""

    console: ChatConsole
    provider: ProviderClient
    catalog: KnowledgeCatalog
    system_prompt: str
    provider_name: str = "azure"
    model_name: str = "chat"
    temperature: float = 0.7


def _read_failed(state: ChatState, ctx: ChatContext, exc: InputError) -> ChatState:
    logger.error("chat.read.failed", extra={"extra": {"code": exc.code, "error": exc.message}})
    if exc.code == "INPUT_EOF":
        state["route"] = "stop"
        state["stop_reason"] = "eof"
        return state
    state["read_errors"] = state.get("read_errors", 0) + 1
    if state["read_errors"] >= MAX_READ_ERRORS:
        state["route"] = "stop"
        state["stop_reason"] = "input-error"
        return state
    ctx.console.error(exc.message)
    state["route"] = "retry"
    return state


def read_node(state: ChatState, ctx: ChatContext) -> ChatState:
    run = state["run"]
    state["user_input"] = None
    state["route"] = "stop"
    state["stop_reason"] = "interrupt"
    if not run.running:
        return state
    try:
        line = ctx.console.read_line(INPUT_PROMPT)
    except InputError as exc:
        return _read_failed(state, ctx, exc)
    state["read_errors"] = 0
    # Ctrl-C 可能在阻塞读取期间到达
    if not run.running:
        return state

    text = line.strip()
    if not text:
        state["stop_reason"] = "empty-input"
    elif text == EXIT_COMMAND:
        state["stop_reason"] = "exit"
    elif text == CLEAR_COMMAND:
        state["route"] = "clear"
    elif text == KNOWLEDGE_COMMAND:
        state["route"] = "knowledge"
    else:
        state["route"] = "query"
        state["user_input"] = text
    return state


def clear_node(state: ChatState, ctx: ChatContext) -> ChatState:
    history = state["history"]
    cleared = len(history)
    history.clear()
    logger.info("chat.history.cleared", extra={"extra": {"cleared": cleared}})
    ctx.console.info("History cleared.")
    return state


def knowledge_node(state: ChatState, ctx: ChatContext) -> ChatState:
    run = state["run"]
    sources = ctx.catalog.sources
    if not sources:
        ctx.console.error("No knowledge sources configured.")
        return state
    ctx.console.show_sources(sources, state["knowledge"].name)
    try:
        raw = ctx.console.read_line(SELECT_PROMPT)
    except InputError as exc:
        logger.error("knowledge.select.read_failed", extra={"extra": {"code": exc.code}})
        if exc.code == "INPUT_EOF":
            run.stop("eof")
        else:
            ctx.console.error(exc.message)
        return state
    if not run.running:
        return state

    choice = raw.strip()
    try:
        source = ctx.catalog.get(int(choice))
    except (ValueError, IndexError):
        ctx.console.error(f"Invalid selection: {choice!r}")
        return state

    try:
        active = ctx.catalog.activate(source)
    except KnowledgeLoadError as exc:
        logger.error(
            "knowledge.load.failed",
            extra={"extra": {"code": exc.code, "source": source.name, "error": exc.message}},
        )
        ctx.console.error(exc.message)
        return state

    state["knowledge"] = active
    logger.info(
        "knowledge.selected",
        extra={"extra": {"source": source.name, "chars": len(active.text)}},
    )
    ctx.console.info(f"Knowledge source: {source.name}")
    return state


def query_node(state: ChatState, ctx: ChatContext) -> ChatState:
    run = state["run"]
    history = state["history"]
    user_input = state["user_input"] or ""
    request = build_request(
        ctx.system_prompt,
        state["knowledge"].text,
        history.messages(),
        user_input,
        provider=ctx.provider_name,
        model=ctx.model_name,
        temperature=ctx.temperature,
    )
    history.add_user(user_input)
    log_ctx = {
        "trace_id": f"tr-{uuid4().hex}",
        "provider": ctx.provider_name,
        "model": ctx.model_name,
        "messages": len(request.messages),
        "knowledge": state["knowledge"].name,
    }
    logger.info("chat.query.start", extra={"extra": log_ctx})
    start_time = time.time()

    error = None
    reply = ""
    with ctx.console.busy(BUSY_MESSAGE):
        try:
            reply = ctx.provider.chat(request).text
        except RemoteCallError as exc:
            error = exc

    elapsed = round(time.time() - start_time, 2)
    if error is not None:
        logger.error(
            "chat.query.failed",
            extra={
                "extra": {
                    **log_ctx,
                    "code": error.code,
                    "http_status": error.http_status,
                    "error": error.message,
                    "elapsed_seconds": elapsed,
                }
            },
        )
        ctx.console.error(f"Error invoking model: {error.message}")
        state["last_error"] = error.code
        return state

    history.add_assistant(reply)
    state["last_error"] = None
    logger.info("chat.query.end", extra={"extra": {**log_ctx, "elapsed_seconds": elapsed}})
    if run.running:
        ctx.console.type_out(reply, run)
    return state


def stop_node(state: ChatState) -> ChatState:
    run = state["run"]
    run.stop(state.get("stop_reason") or "exit")
    logger.info("chat.stopped", extra={"extra": {"reason": run.reason}})
    return state


def route_after_read(state: ChatState) -> str:
    return state.get("route") or "stop"


def build_graph(ctx: ChatContext) -> CompiledStateGraph:
    graph = StateGraph(ChatState)
    graph.add_node("read", lambda s: read_node(s, ctx))
    graph.add_node("clear", lambda s: clear_node(s, ctx))
    graph.add_node("select_knowledge", lambda s: knowledge_node(s, ctx))
    graph.add_node("query", lambda s: query_node(s, ctx))
    graph.add_node("stop", stop_node)
    graph.set_entry_point("read")
    graph.add_conditional_edges(
        "read",
        route_after_read,
        {
            "clear": "clear",
            "knowledge": "select_knowledge",
            "query": "query",
            "stop": "stop",
            "retry": END,
        },
    )
    for name in ("clear", "select_knowledge", "query", "stop"):
        graph.add_edge(name, END)
    return graph.compile()
