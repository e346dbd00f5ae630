"""命令行入口：校验配置、安装 Ctrl-C 处理、启动 REPL。"""

from __future__ import annotations

import argparse
import signal
from typing import Optional, Sequence

from rich.console import Console

from kbchat.config.settings import settings
from kbchat.console import RichChatConsole
from kbchat.domain.exceptions import ConfigError, KnowledgeLoadError
from kbchat.flows import ChatContext, RunState, initial_state, run_chat
from kbchat.infrastructure.logging.logger import logger
from kbchat.knowledge.catalog import ActiveKnowledge, KnowledgeCatalog
from kbchat.prompts import load_system_prompt
from kbchat.providers import create_provider


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="kbchat",
        description="Chat with an Azure OpenAI deployment, optionally primed with a knowledge file.",
    )
    parser.add_argument(
        "--knowledge",
        metavar="NAME",
        help="knowledge source to activate before the first prompt (see the 'knowledge' command)",
    )
    parser.add_argument(
        "--no-typing",
        action="store_true",
        help="print replies at once instead of character by character",
    )
    return parser.parse_args(argv)


def _install_interrupt_handler(run: RunState):
    def _on_interrupt(signum, frame):
        logger.debug("cli.interrupt", extra={"extra": {"signal": signum}})
        run.stop("interrupt")

    return signal.signal(signal.SIGINT, _on_interrupt)


def _preselect(catalog: KnowledgeCatalog, name: str, console: RichChatConsole) -> ActiveKnowledge:
    try:
        return catalog.activate(catalog.find(name))
    except KeyError:
        console.error(f"Unknown knowledge source: {name}")
    except KnowledgeLoadError as exc:
        logger.error("knowledge.load.failed", extra={"extra": {"code": exc.code, "source": name, "error": exc.message}})
        console.error(exc.message)
    return ActiveKnowledge.empty()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        settings.require_service()
    except ConfigError as exc:
        logger.error("cli.config.invalid", extra={"extra": {"code": exc.code, "missing": exc.extra.get("missing")}})
        Console(stderr=True).print(f"Configuration error: {exc.message}", style="bold red", markup=False)
        return 1

    console = RichChatConsole(typing_delay=0.0 if args.no_typing else settings.typing_delay)
    catalog = KnowledgeCatalog.from_config(settings.knowledge_sources, base_dir=settings.knowledge_base_dir())
    ctx = ChatContext(
        console=console,
        provider=create_provider(settings.default_provider),
        catalog=catalog,
        system_prompt=settings.system_prompt or load_system_prompt(),
        provider_name=settings.default_provider,
        model_name=settings.default_model,
    )

    run = RunState()
    knowledge = _preselect(catalog, args.knowledge, console) if args.knowledge else None
    previous = _install_interrupt_handler(run)
    try:
        return run_chat(ctx, initial_state(run, knowledge=knowledge))
    finally:
        signal.signal(signal.SIGINT, previous)
