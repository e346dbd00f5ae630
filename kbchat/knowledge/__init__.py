"""知识块加载。

- loader: 解析 PII / MQ 两类 JSON 知识文件并渲染成文本。
- catalog: knowledge 命令使用的知识源菜单。
"""

from .catalog import ActiveKnowledge, KnowledgeCatalog, KnowledgeSource
from .loader import KnowledgeKind, load

__all__ = ["ActiveKnowledge", "KnowledgeCatalog", "KnowledgeSource", "KnowledgeKind", "load"]
