"""系统提示词加载与请求组装。

按语言(locale) 从 prompts/<locale> 目录读取 system prompt 文本，
并把 system 指令、知识块、历史消息和本轮输入拼成一次 ChatRequest。
"""

from pathlib import Path
from typing import Iterable, List, Optional

from kbchat.domain.models import ChatMessage, ChatRequest


PROMPTS_DIR = Path(__file__).resolve().parent


def load_system_prompt(locale: str = "en") -> str:
    """加载内置的系统提示词文本（去掉首尾空白）。"""

    fname = PROMPTS_DIR / locale / "chat_system.md"
    return fname.read_text(encoding="utf-8").strip()


def build_messages(
    system_instruction: str,
    active_knowledge: str,
    history: Iterable[ChatMessage],
    new_input: str,
) -> List[ChatMessage]:
    """组装发送给模型的消息列表。

    顺序固定为：system 指令、（非空时）知识块、完整历史、本轮用户输入。
    历史不做裁剪，本函数也不修改历史。
    """

    messages = [ChatMessage(role="system", content=system_instruction)]
    if active_knowledge:
        messages.append(ChatMessage(role="system", content=active_knowledge))
    messages.extend(history)
    messages.append(ChatMessage(role="user", content=new_input))
    return messages


def build_request(
    system_instruction: str,
    active_knowledge: str,
    history: Iterable[ChatMessage],
    new_input: str,
    *,
    provider: str,
    model: str,
    temperature: float = 0.7,
    max_tokens: Optional[int] = None,
) -> ChatRequest:
    return ChatRequest(
        provider=provider,
        model=model,
        messages=build_messages(system_instruction, active_knowledge, history, new_input),
        temperature=temperature,
        max_tokens=max_tokens,
    )
