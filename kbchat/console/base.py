"""终端输出接口。

REPL 状态机只通过 ChatConsole 与终端交互，
测试里可以用记录型的假实现替换真实终端。
"""

from typing import ContextManager, Optional, Protocol, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from kbchat.flows.state import RunState
    from kbchat.knowledge.catalog import KnowledgeSource


class ChatConsole(Protocol):
    def read_line(self, prompt: str) -> str:
        """读取一行输入（含或不含换行均可）。失败时抛出 InputError。"""

        ...

    def busy(self, message: str) -> ContextManager[object]:
        """远端调用期间显示的忙碌提示，退出上下文时必须清除。"""

        ...

    def type_out(self, text: str, run: "RunState") -> bool:
        """逐字输出回复；run 被取消时提前停止并返回 False。"""

        ...

    def show_sources(self, sources: Sequence["KnowledgeSource"], active: Optional[str]) -> None:
        ...

    def info(self, text: str) -> None:
        ...

    def error(self, text: str) -> None:
        ...
