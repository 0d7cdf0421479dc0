from .models import Chat, Message, Settings
from .service import ChatService
from .settings import SettingsService

__all__ = ["Chat", "ChatService", "Message", "Settings", "SettingsService"]
