"""统一的对话与结果数据模型。

本模块定义了聊天客户端内部共享的标准数据结构：

- ChatMessage: 一条对话消息（system/user/assistant）。
- ChatRequest: 发给底层 LLM Provider 的完整请求。
- ChatResult: 从 Provider 解析后的统一响应结果。

Provider 适配器（如 AzureOpenAIClient）只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass
from typing import List, Literal, Optional


# LLM 消息角色类型（与 OpenAI / Azure OpenAI 的 role 字段对应）
Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息，创建后不可修改。

    - role: 消息角色。会话历史里只会出现 user/assistant，
      system 只在组装请求时使用。
    - content: 纯文本内容。
    """

    role: Role
    content: str


@dataclass
class ChatRequest:
    """一次完整的聊天请求。

    Prompt 组装器生成 ChatRequest，再交给具体 ProviderClient；
    Provider 适配层负责把本结构转换成对应 API 的 JSON 请求体。
    """

    provider: str  # 逻辑 Provider 名，如 "azure"
    model: str  # 逻辑模型名，如 "chat"（再由 registry 映射为 deployment）
    messages: List[ChatMessage]
    temperature: float = 0.7
    top_p: float = 0.95
    max_tokens: Optional[int] = None


@dataclass
class ChatUsage:
    """Provider 返回的 token 统计信息（统一格式）。"""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class ChatChoice:
    """单个候选回答（目前只使用 index=0 的一条）。"""

    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


@dataclass
class ChatResult:
    """一次对话调用的最终结果。

    - provider: 逻辑 Provider 名。
    - model: 逻辑模型名。
    - choices: 至少一个候选回答（Provider 负责保证）。
    - usage: 可选的 token 使用统计。
    - raw: 原始响应 JSON，用于调试。
    """

    provider: str
    model: str
    choices: List[ChatChoice]
    usage: Optional[ChatUsage] = None
    raw: Optional[dict] = None

    @property
    def text(self) -> str:
        return self.choices[0].message.content
