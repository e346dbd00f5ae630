"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。
必填项（服务地址与密钥）在启动时由 require_service() 校验。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from kbchat.domain.exceptions import ConfigError


# 仓库根目录：config.yaml 与 data/ 的默认位置
PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("AGENT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        PROJECT_ROOT / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class KnowledgeSourceConfig(BaseModel):
    """知识源菜单中的一项。kind/path 为空表示“不加载知识”。"""

    name: str
    kind: Optional[Literal["pii", "mq"]] = None
    path: Optional[str] = None


def _default_knowledge_sources() -> List[KnowledgeSourceConfig]:
    return [
        KnowledgeSourceConfig(name="None"),
        KnowledgeSourceConfig(name="PII", kind="pii", path="data/pii_knowledge.json"),
        KnowledgeSourceConfig(name="MQ", kind="mq", path="data/mq_knowledge.json"),
    ]


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- Azure OpenAI 服务 ----
    open_ai_service_url: Optional[str] = Field(
        default=None,
        description="Azure OpenAI 服务基础 URL（OPEN_AI_SERVICE_URL）",
    )
    open_ai_service_key: Optional[str] = Field(
        default=None,
        description="Azure OpenAI 访问密钥（OPEN_AI_SERVICE_KEY）",
    )
    azure_api_version: str = Field(default="2023-03-15-preview", description="api-version 查询参数")
    azure_deployment_id: Optional[str] = Field(default=None, description="部署名，覆盖 registry 中的默认值（gpt-4）")
    default_provider: str = Field(default="azure", description="默认使用的 Provider 名称")
    default_model: str = Field(default="chat", description="逻辑模型名，由 registry 映射为部署名")
    http_timeout: float = Field(default=60.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_level: str = Field(default="INFO", description="日志级别")
    log_redact_content: bool = Field(default=False, description="是否截断日志内容")

    # ---- 终端交互 ----
    typing_delay: float = Field(default=0.02, ge=0.0, description="逐字输出的间隔（秒）")
    system_prompt: Optional[str] = Field(default=None, description="覆盖内置的系统提示词")
    knowledge_dir: Optional[str] = Field(default=None, description="知识源相对路径的基准目录，默认为仓库根目录")
    knowledge_sources: List[KnowledgeSourceConfig] = Field(
        default_factory=_default_knowledge_sources,
        description="knowledge 命令列出的知识源",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )

    def require_service(self) -> None:
        """校验远端服务配置，缺失时抛出 ConfigError。"""

        missing = [
            env_name
            for env_name, value in (
                ("OPEN_AI_SERVICE_URL", self.open_ai_service_url),
                ("OPEN_AI_SERVICE_KEY", self.open_ai_service_key),
            )
            if not value
        ]
        if missing:
            raise ConfigError(
                code="MISSING_CONFIG",
                message=f"{', '.join(missing)} is not set",
                missing=missing,
            )

    def knowledge_base_dir(self) -> Path:
        """知识源中相对路径的解析基准。"""

        if self.knowledge_dir:
            return Path(self.knowledge_dir).expanduser()
        return PROJECT_ROOT


settings = Settings()
