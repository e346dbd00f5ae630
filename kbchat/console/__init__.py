"""终端交互层。"""

from .base import ChatConsole
from .rich_console import RichChatConsole

__all__ = ["ChatConsole", "RichChatConsole"]
