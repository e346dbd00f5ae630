"""Azure OpenAI Provider 适配器。

本模块负责：

1. 接收统一的 ChatRequest。
2. 将其转换为 Azure OpenAI chat/completions 请求：
   - URL: {base_url}/openai/deployments/{deployment}/chat/completions?api-version=...
   - 认证: api-key: <key>
3. 调用 HTTP 接口并把网络/认证/限流/服务端错误映射为 RemoteCallError 子类。
4. 将响应 JSON 解析为统一的 ChatResult。
"""

from typing import Any, Dict, List

import httpx

from kbchat.config.settings import settings
from kbchat.domain.exceptions import (
    ApiError,
    AuthError,
    ConfigError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
)
from kbchat.domain.models import ChatChoice, ChatMessage, ChatRequest, ChatResult, ChatUsage
from kbchat.providers.registry import AZURE_CONFIG, ModelConfig


class AzureOpenAIClient:
    """Azure OpenAI 客户端实现。

    - name: Provider 名称（供日志使用）。
    - chat: 对外统一调用入口，每次调用只发送一个请求，不做重试。
    """

    name = "azure"

    def __init__(self, cfg=settings):
        # Settings 里包含服务地址、密钥、api-version、超时等配置
        self._settings = cfg

    def chat(self, req: ChatRequest) -> ChatResult:
        base = getattr(self._settings, "open_ai_service_url", None)
        api_key = getattr(self._settings, "open_ai_service_key", None)
        if not base or not api_key:
            raise ConfigError(code="MISSING_CONFIG", message="OPEN_AI_SERVICE_URL/OPEN_AI_SERVICE_KEY not set")
        model_cfg = self._model_config(req.model)
        deployment = getattr(self._settings, "azure_deployment_id", None) or model_cfg.provider_model
        api_version = getattr(self._settings, "azure_api_version", None) or AZURE_CONFIG.api_version
        payload = self._build_payload(req, model_cfg)
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    f"{base.rstrip('/')}/openai/deployments/{deployment}/chat/completions",
                    params={"api-version": api_version},
                    json=payload,
                    headers={
                        "api-key": api_key,
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__)
        if resp.status_code in (401, 403):
            raise AuthError(code="AUTH_ERROR", message=resp.text, http_status=resp.status_code)
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message="Azure OpenAI rate limit", http_status=429)
        if resp.status_code >= 400:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponseError(code="MALFORMED_RESPONSE", message=f"response is not JSON: {e}")
        return self._parse_response(data, req)

    @staticmethod
    def _model_config(logical_name: str) -> ModelConfig:
        cfg = AZURE_CONFIG.models.get(logical_name)
        if cfg is not None:
            return cfg
        # 未登记的逻辑名直接当作部署名使用
        default = AZURE_CONFIG.models["chat"]
        return ModelConfig(
            logical_name=logical_name,
            provider_model=logical_name,
            max_tokens=default.max_tokens,
            default_temperature=default.default_temperature,
        )

    def _build_payload(self, req: ChatRequest, model_cfg: ModelConfig) -> dict:
        """将 ChatRequest 转成 Azure 所需的请求 JSON。"""

        return {
            "messages": [self._message_to_payload(m) for m in req.messages],
            "temperature": req.temperature if req.temperature is not None else model_cfg.default_temperature,
            "max_tokens": req.max_tokens or model_cfg.max_tokens,
            "top_p": req.top_p,
        }

    def _parse_response(self, data: Any, req: ChatRequest) -> ChatResult:
        """将原始响应 JSON 解析为统一的 ChatResult。"""

        if not isinstance(data, dict):
            raise MalformedResponseError(code="MALFORMED_RESPONSE", message="response body is not an object")
        raw_choices = data.get("choices")
        if not isinstance(raw_choices, list) or not raw_choices:
            raise MalformedResponseError(code="MALFORMED_RESPONSE", message="response has no choices")
        choices: List[ChatChoice] = []
        for i, ch in enumerate(raw_choices):
            if not isinstance(ch, dict):
                raise MalformedResponseError(code="MALFORMED_RESPONSE", message=f"choice {i} is not an object")
            msg = ch.get("message")
            if not isinstance(msg, dict):
                raise MalformedResponseError(
                    code="MALFORMED_RESPONSE",
                    message=f"choice {i} has no message object",
                    finish_reason=ch.get("finish_reason"),
                )
            content = msg.get("content")
            if not isinstance(content, str):
                raise MalformedResponseError(
                    code="MALFORMED_RESPONSE",
                    message=f"choice {i} has no text content",
                    finish_reason=ch.get("finish_reason"),
                )
            choices.append(
                ChatChoice(
                    index=ch.get("index", i),
                    message=ChatMessage(role="assistant", content=content),
                    finish_reason=ch.get("finish_reason"),
                )
            )
        usage_raw = data.get("usage")
        if usage_raw is None:
            usage_raw = {}
        if not isinstance(usage_raw, dict):
            raise MalformedResponseError(code="MALFORMED_RESPONSE", message="usage is not an object")
        usage = ChatUsage(
            prompt_tokens=usage_raw.get("prompt_tokens", 0),
            completion_tokens=usage_raw.get("completion_tokens", 0),
            total_tokens=usage_raw.get("total_tokens", 0),
        )
        return ChatResult(provider=self.name, model=req.model, choices=choices, usage=usage, raw=data)

    @staticmethod
    def _message_to_payload(message: ChatMessage) -> Dict[str, Any]:
        return {"role": message.role, "content": message.content}
