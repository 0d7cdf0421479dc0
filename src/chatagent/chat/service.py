"""Chat facade: transcript persistence and streamed replies.

Every mutation is a read-modify-write of the whole ``chats`` collection,
serialized by the store's write lock. The assistant reply is committed
only after its stream completes.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..config import CHATS_KEY, CONTEXT_WINDOW_MESSAGES, DEFAULT_CHAT_TITLE
from ..errors import ChatAgentError, ChatNotFoundError, ModelError
from ..llm.base import ChunkCallback
from ..llm.manager import ProviderManager
from ..llm.models import MessageRole, SendOptions
from ..store.base import KeyValueStore
from .models import Chat, Message
from .settings import SettingsService

logger = logging.getLogger(__name__)

_UPDATABLE_CHAT_FIELDS = {"title"}
_UPDATABLE_MESSAGE_FIELDS = {"content"}


class ChatService:
    """Orchestrates chat history and the provider exchange."""

    def __init__(
        self,
        store: KeyValueStore,
        manager: ProviderManager,
        settings: SettingsService,
        context_window: int = CONTEXT_WINDOW_MESSAGES,
    ):
        self._store = store
        self._manager = manager
        self._settings = settings
        self._context_window = context_window

    async def get_all_chats(self) -> list[Chat]:
        return [Chat.model_validate(item) for item in await self._store.get(CHATS_KEY) or []]

    async def get_chat(self, chat_id: str) -> Chat | None:
        for chat in await self.get_all_chats():
            if chat.id == chat_id:
                return chat
        return None

    async def create_chat(self, title: str = DEFAULT_CHAT_TITLE) -> Chat:
        """Create an empty chat, placed first in the list."""
        chat = Chat(title=title)
        await self._store.update(CHATS_KEY, lambda chats: [chat.to_store(), *chats], default=[])
        logger.debug(f"Created chat {chat.id}")
        return chat

    async def delete_chat(self, chat_id: str) -> None:
        await self._store.update(
            CHATS_KEY,
            lambda chats: [item for item in chats if item.get("id") != chat_id],
            default=[],
        )

    async def clear_all(self) -> None:
        await self._store.update(CHATS_KEY, lambda _: [], default=[])

    async def _mutate_chat(self, chat_id: str, mutate: Callable[[Chat], Any]) -> Any:
        """Apply ``mutate`` to one stored chat and write the collection back.

        Raises:
            ChatNotFoundError: If no chat has ``chat_id``
        """
        result = None

        def apply(chats: list[dict]) -> list[dict]:
            nonlocal result
            for index, item in enumerate(chats):
                if item.get("id") == chat_id:
                    chat = Chat.model_validate(item)
                    result = mutate(chat)
                    chat.touch()
                    chats[index] = chat.to_store()
                    return chats
            raise ChatNotFoundError(f"Chat {chat_id} not found", details={"chatId": chat_id})

        await self._store.update(CHATS_KEY, apply, default=[])
        return result

    async def update_chat(self, chat_id: str, **updates: Any) -> Chat:
        """Update chat fields (currently ``title``)."""
        unknown = set(updates) - _UPDATABLE_CHAT_FIELDS
        if unknown:
            raise ModelError(
                f"Cannot update chat fields: {sorted(unknown)}",
                details={"allowed": sorted(_UPDATABLE_CHAT_FIELDS)},
            )

        def apply(chat: Chat) -> Chat:
            for field, value in updates.items():
                setattr(chat, field, value)
            return chat

        return await self._mutate_chat(chat_id, apply)

    async def append_message(self, chat_id: str, message: Message | Mapping[str, Any]) -> Message:
        """Append a message to a chat and persist it."""
        if not isinstance(message, Message):
            try:
                message = Message.model_validate(message)
            except ValueError as e:
                raise ModelError("Invalid message", details=str(e)) from e

        def apply(chat: Chat) -> Message:
            chat.messages.append(message)
            return message

        return await self._mutate_chat(chat_id, apply)

    async def update_message(self, chat_id: str, message_id: str, **updates: Any) -> Message:
        """Update message fields (currently ``content``)."""
        unknown = set(updates) - _UPDATABLE_MESSAGE_FIELDS
        if unknown:
            raise ModelError(
                f"Cannot update message fields: {sorted(unknown)}",
                details={"allowed": sorted(_UPDATABLE_MESSAGE_FIELDS)},
            )

        def apply(chat: Chat) -> Message:
            for index, message in enumerate(chat.messages):
                if message.id == message_id:
                    chat.messages[index] = message.model_copy(update=updates)
                    return chat.messages[index]
            raise ChatNotFoundError(
                f"Message {message_id} not found in chat {chat_id}",
                details={"chatId": chat_id, "messageId": message_id},
            )

        return await self._mutate_chat(chat_id, apply)

    async def send_user_message(
        self,
        chat_id: str,
        text: str,
        on_chunk: ChunkCallback | None = None,
        options: SendOptions | None = None,
    ) -> Message:
        """Append a user message and stream the assistant reply.

        The reply is built from the fragments passed to ``on_chunk`` and is
        written to the store only once the stream completes. If the stream
        fails, the user message stays and no assistant message is added.

        Args:
            chat_id: Target chat
            text: User input
            on_chunk: Receives each content fragment as it arrives
            options: Request options (default: selected model from settings)

        Returns:
            The assistant message
        """
        if not text.strip():
            raise ModelError("Message content is empty")
        if options is None:
            options = await self._settings.send_options()

        user_message = Message(role=MessageRole.USER, content=text)

        def add_user_message(chat: Chat) -> list[Message]:
            chat.messages.append(user_message)
            return chat.recent_messages(self._context_window)

        history = await self._mutate_chat(chat_id, add_user_message)

        fragments: list[str] = []

        def collect(fragment: str) -> None:
            fragments.append(fragment)
            if on_chunk is not None:
                on_chunk(fragment)

        try:
            await self._manager.send_message(history, options, collect)
        except ChatAgentError as e:
            logger.error(f"Reply for chat {chat_id} failed: {e.message}")
            raise

        reply = Message(role=MessageRole.ASSISTANT, content="".join(fragments))
        if not reply.content:
            logger.warning(f"Empty reply for chat {chat_id}; not stored")
            return reply

        try:
            await self.append_message(chat_id, reply)
        except ChatNotFoundError:
            logger.warning(f"Chat {chat_id} was deleted while the reply streamed")
        return reply
