"""kbchat 顶层包。

交互式命令行聊天客户端：把用户输入连同会话历史和可选的知识块
一起发给 Azure OpenAI 部署，并以打字效果输出回复。
"""

from kbchat.cli import main

__all__ = ["main"]
