"""Provider 与模型配置。

本模块将“逻辑模型名”与“具体部署名”解耦：

- 逻辑名（logical_name）：在代码里使用的统一名称，例如 "chat"。
- provider_model：Azure 上的 deployment id，例如 "gpt-4"。

上层只关心逻辑名，具体用哪个部署由这里集中配置（可被 settings 覆盖）。"""

from dataclasses import dataclass
from typing import Dict, Mapping


@dataclass
class ModelConfig:
    """单个逻辑模型的配置。"""

    logical_name: str
    provider_model: str
    max_tokens: int
    default_temperature: float


@dataclass
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    api_version: str
    models: Dict[str, ModelConfig]


AZURE_CONFIG = ProviderConfig(
    name="azure",
    api_version="2023-03-15-preview",
    models={
        "chat": ModelConfig(
            logical_name="chat",
            provider_model="gpt-4",
            max_tokens=4096,
            default_temperature=0.7,
        )
    },
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "azure": AZURE_CONFIG,
}


def get_provider_config(name: str) -> ProviderConfig:
    """根据名称获取 ProviderConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")
