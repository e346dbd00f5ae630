"""基于 rich 的终端实现：彩色提示符、spinner 以及逐字输出效果。"""

from __future__ import annotations

import time
from typing import Callable, ContextManager, Optional, Sequence, TYPE_CHECKING

from rich.console import Console
from rich.text import Text

from kbchat.domain.exceptions import InputError

if TYPE_CHECKING:
    from kbchat.flows.state import RunState
    from kbchat.knowledge.catalog import KnowledgeSource


class RichChatConsole:
    """ChatConsole 的 rich 实现。

    Args:
        console: rich Console，默认输出到 stdout。
        typing_delay: 两个字符之间的间隔（秒），0 表示一次性输出。
        sleep: 可替换的 sleep 函数，测试时传入空函数。
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        typing_delay: float = 0.02,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._console = console or Console()
        self._typing_delay = typing_delay
        self._sleep = sleep

    def read_line(self, prompt: str) -> str:
        try:
            return self._console.input(Text(prompt, style="bright_green"))
        except EOFError as exc:
            raise InputError(code="INPUT_EOF", message="end of input") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise InputError(code="INPUT_READ_ERROR", message=f"Error reading input: {exc}") from exc

    def busy(self, message: str) -> ContextManager[object]:
        return self._console.status(
            Text(message, style="blue"),
            spinner="line",
            spinner_style="green",
            speed=1.0,
        )

    def type_out(self, text: str, run: "RunState") -> bool:
        completed = True
        for ch in text:
            if not run.running:
                completed = False
                break
            self._console.print(ch, end="", style="yellow", markup=False, highlight=False, emoji=False)
            if self._typing_delay > 0:
                self._sleep(self._typing_delay)
        self._console.print()
        return completed

    def show_sources(self, sources: Sequence["KnowledgeSource"], active: Optional[str]) -> None:
        self._console.print("Knowledge sources:", style="bold")
        for idx, source in enumerate(sources):
            marker = " *" if active is not None and source.name == active else ""
            self._console.print(f"  [{idx}] {source.describe()}{marker}", markup=False, highlight=False)

    def info(self, text: str) -> None:
        self._console.print(text, style="cyan", markup=False, highlight=False)

    def error(self, text: str) -> None:
        self._console.print(text, style="bold red", markup=False, highlight=False)
