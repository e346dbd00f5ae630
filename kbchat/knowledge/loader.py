"""知识文件加载与扁平化。

读取 JSON 知识文件，用严格的 pydantic 模型校验结构，
再把结构化内容渲染成一段可直接放进 system 消息的文本。
渲染完成后结构化对象即被丢弃，只保留字符串。
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Literal, Type, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from kbchat.domain.exceptions import KnowledgeLoadError
from kbchat.infrastructure.logging.logger import logger


KnowledgeKind = Literal["pii", "mq"]

PII_HEADER = "Here is the knowledge about Category of PII (Personal Identifiable Information) :"
NON_PII_HEADER = "Here is the knowledge about Category of Non-PII (Personal Identifiable Information) :"
MQ_BACKGROUND_HEADER = "Here is the knowledge about Message sync MQ Pub/Sub :"
MQ_STATE_HEADER = "Here is the knowledge about Message sync MQ Pub/Sub Current State :"
MQ_TECHNOLOGY_HEADER = "Here is the knowledge about Message sync MQ Pub/Sub Technology :"
MQ_TOPICS_HEADER = "Here is the knowledge about Message sync MQ Pub/Sub Topics :"


class _StrictModel(BaseModel):
    model_config = ConfigDict(strict=True, frozen=True)


class PIIKnowledge(_StrictModel):
    pii_description: List[str]
    exclude_pii_description: List[str]


class MQTopic(_StrictModel):
    business_module: str
    topic_name: str
    publisher: str
    remark: str


class MQKnowledge(_StrictModel):
    mq_data_background: str
    mq_data_current_state: str
    mq_technology: str
    mq_pub_sub_topics: List[MQTopic]


KnowledgeDocument = Union[PIIKnowledge, MQKnowledge]


def render_pii(doc: PIIKnowledge) -> str:
    lines = [PII_HEADER, *doc.pii_description, NON_PII_HEADER, *doc.exclude_pii_description]
    return "".join(f"{line}\n" for line in lines)


def render_mq(doc: MQKnowledge) -> str:
    lines = [
        MQ_BACKGROUND_HEADER,
        doc.mq_data_background,
        MQ_STATE_HEADER,
        doc.mq_data_current_state,
        MQ_TECHNOLOGY_HEADER,
        doc.mq_technology,
        MQ_TOPICS_HEADER,
    ]
    for topic in doc.mq_pub_sub_topics:
        lines.extend(
            [
                f"Business Module: {topic.business_module}",
                f"Topic Name or Topic String: {topic.topic_name}",
                f"Publisher: {topic.publisher}",
                f"Remark: {topic.remark}",
            ]
        )
    # 最后一个 topic 之后额外保留一个空行
    return "".join(f"{line}\n" for line in lines) + "\n"


_SCHEMAS: Dict[str, Type[_StrictModel]] = {
    "pii": PIIKnowledge,
    "mq": MQKnowledge,
}

_RENDERERS: Dict[str, Callable] = {
    "pii": render_pii,
    "mq": render_mq,
}


def parse(kind: KnowledgeKind, raw: str, source: str = "<string>") -> KnowledgeDocument:
    """按 kind 对应的 schema 解析 JSON 文本。"""

    schema = _SCHEMAS.get(kind)
    if schema is None:
        raise KnowledgeLoadError(
            code="KNOWLEDGE_UNKNOWN_KIND",
            message=f"Unknown knowledge kind: {kind!r}",
            path=source,
        )
    try:
        return schema.model_validate_json(raw)
    except ValidationError as exc:
        raise KnowledgeLoadError(
            code="KNOWLEDGE_PARSE_ERROR",
            message=f"Failed to parse {kind} knowledge from {source}: {_summarize(exc)}",
            path=source,
        ) from exc


def load(kind: KnowledgeKind, file_path: Union[str, Path]) -> str:
    """读取并渲染一个知识文件，返回扁平化后的文本。

    Raises:
        KnowledgeLoadError: 文件不可读、JSON 非法或字段不符合 schema。
    """

    path = Path(file_path)
    if kind not in _SCHEMAS:
        raise KnowledgeLoadError(
            code="KNOWLEDGE_UNKNOWN_KIND",
            message=f"Unknown knowledge kind: {kind!r}",
            path=str(path),
        )
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise KnowledgeLoadError(
            code="KNOWLEDGE_READ_ERROR",
            message=f"Failed to read knowledge file {path}: {exc}",
            path=str(path),
        ) from exc

    doc = parse(kind, raw, source=str(path))
    logger.debug(
        "knowledge.parsed",
        extra={"extra": {"path": str(path), "kind": kind, "summary": _describe(doc)}},
    )
    return _RENDERERS[kind](doc)


def _describe(doc: KnowledgeDocument) -> Dict[str, int]:
    if isinstance(doc, PIIKnowledge):
        return {"pii": len(doc.pii_description), "exclude_pii": len(doc.exclude_pii_description)}
    return {"topics": len(doc.mq_pub_sub_topics)}


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors()[:3]:
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg')}")
    if exc.error_count() > 3:
        parts.append(f"... {exc.error_count() - 3} more")
    return "; ".join(parts)
