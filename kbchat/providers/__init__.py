"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 与模型配置 (registry)。
- 提供具体实现 (azure_client)。
"""

from typing import Optional

from kbchat.config.settings import settings
from kbchat.providers.base import ProviderClient
from kbchat.providers.azure_client import AzureOpenAIClient
from kbchat.providers.registry import get_provider_config


def create_provider(name: Optional[str] = None) -> ProviderClient:
    """根据名称创建 Provider 实例，默认取配置中的 provider。

    Raises:
        KeyError: 名称未在 registry 中登记。
    """

    provider_name = (name or getattr(settings, "default_provider", "azure")).lower()
    cfg = get_provider_config(provider_name)
    if cfg.name == "azure":
        return AzureOpenAIClient(settings)
    raise KeyError(f"No client implementation for provider: {cfg.name!r}")
