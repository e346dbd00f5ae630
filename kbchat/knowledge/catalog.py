"""可选择的知识源列表。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from kbchat.config.settings import KnowledgeSourceConfig

from .loader import KnowledgeKind, load


@dataclass(frozen=True)
class KnowledgeSource:
    name: str
    kind: Optional[KnowledgeKind] = None
    path: Optional[str] = None

    @property
    def has_file(self) -> bool:
        return bool(self.kind and self.path)

    def describe(self) -> str:
        return f"{self.name} ({self.path})" if self.has_file else self.name


@dataclass(frozen=True)
class ActiveKnowledge:
    """当前生效的知识文本；切换知识源时整体替换。"""

    name: Optional[str] = None
    text: str = ""

    @classmethod
    def empty(cls) -> "ActiveKnowledge":
        return cls()


class KnowledgeCatalog:
    """按序号列出知识源，并负责把选中的知识源加载为 ActiveKnowledge。"""

    def __init__(self, sources: Iterable[KnowledgeSource], base_dir: Optional[Path] = None):
        self._sources: List[KnowledgeSource] = list(sources)
        self._base_dir = base_dir

    @classmethod
    def from_config(
        cls, entries: Iterable[KnowledgeSourceConfig], base_dir: Optional[Path] = None
    ) -> "KnowledgeCatalog":
        return cls(
            (KnowledgeSource(name=e.name, kind=e.kind, path=e.path) for e in entries),
            base_dir=base_dir,
        )

    @property
    def sources(self) -> List[KnowledgeSource]:
        return list(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def get(self, index: int) -> KnowledgeSource:
        if index < 0 or index >= len(self._sources):
            raise IndexError(f"knowledge source index out of range: {index}")
        return self._sources[index]

    def find(self, name: str) -> KnowledgeSource:
        key = name.lower()
        for source in self._sources:
            if source.name.lower() == key:
                return source
        raise KeyError(f"Unknown knowledge source: {name!r}")

    def activate(self, source: KnowledgeSource) -> ActiveKnowledge:
        """加载知识源。失败时抛出 KnowledgeLoadError，调用方原有的知识保持不变。"""

        if not source.has_file:
            return ActiveKnowledge(name=source.name, text="")
        path = Path(source.path)
        if self._base_dir is not None and not path.is_absolute():
            path = self._base_dir / path
        text = load(source.kind, path)
        return ActiveKnowledge(name=source.name, text=text)
