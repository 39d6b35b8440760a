"""
Agent lifecycle hooks and tools backed by the memory API.

MemoryPlugin wires two hooks and two tools around a MemoryClient:
- before_agent_start: recall memories related to the latest user message
  and append them as a system message
- agent_end: store the latest user message when the capture policy fires
- memory_recall / memory_store: explicit tools for the agent

Hook failures are logged and swallowed so a memory outage never aborts
an agent turn. Tool failures propagate to the caller.
"""

from typing import Any

import structlog

from memstore.plugin.capture import CapturePolicy
from memstore.plugin.client import MemoryClient, MemoryClientError
from memstore.plugin.config import PluginConfig

logger = structlog.get_logger(__name__)

MEMORY_PREAMBLE = (
    "The following are background memories that MAY be relevant. Only reference "
    "them if they are directly related to what the user is asking. Do not lead "
    "with or summarize these memories; focus on answering the user's actual "
    "question first."
)

NO_MEMORIES = "No relevant memories found."


def extract_text(message: dict[str, Any] | None) -> str:
    """
    Get the plain text of a chat message.

    Content may be a string or a list of parts; only ``{"type": "text"}``
    parts are kept, joined with spaces.
    """
    if not message:
        return ""

    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return " ".join(
            str(part.get("text", ""))
            for part in content
            if isinstance(part, dict) and part.get("type") == "text"
        )
    return ""


def last_user_message(messages: list[dict[str, Any]] | None) -> dict[str, Any] | None:
    for message in reversed(messages or []):
        if message.get("role") == "user":
            return message
    return None


def format_memories(hits: list[dict[str, Any]]) -> str:
    """Render recalled hits as a <relevant-memories> block."""
    lines = [f"- {hit.get('content', '')}" for hit in hits]
    return "\n".join(
        ["<relevant-memories>", MEMORY_PREAMBLE, "", *lines, "</relevant-memories>"]
    )


class MemoryPlugin:
    """
    Memory plugin for a chat agent.

    Usage:
        plugin = MemoryPlugin(PluginConfig())
        await plugin.before_agent_start(messages)
        ... run the agent ...
        await plugin.agent_end(messages)
    """

    def __init__(
        self,
        config: PluginConfig | None = None,
        client: MemoryClient | None = None,
        policy: CapturePolicy | None = None,
    ):
        self._config = config or PluginConfig()
        self._client = client or MemoryClient(self._config)
        self._policy = policy or CapturePolicy(self._config.capture_patterns)

    @property
    def config(self) -> PluginConfig:
        return self._config

    @property
    def policy(self) -> CapturePolicy:
        return self._policy

    async def close(self) -> None:
        await self._client.close()

    async def before_agent_start(self, messages: list[dict[str, Any]]) -> str | None:
        """
        Auto-recall hook.

        Searches with the latest user message and, when anything clears
        ``min_score``, appends a system message holding the memories.

        Returns:
            The injected block, or None when nothing was injected
        """
        if not self._config.auto_recall:
            return None

        query = extract_text(last_user_message(messages))
        if not query.strip():
            return None

        try:
            hits = await self._client.search(
                query,
                limit=self._config.recall_limit,
                threshold=self._config.min_score,
            )
        except MemoryClientError as e:
            logger.warning("Memory recall failed", error=str(e))
            return None
        except Exception as e:
            logger.warning("Memory recall failed", error=str(e), exc_info=True)
            return None

        hits = [hit for hit in hits if isinstance(hit, dict)]
        if not hits:
            return None

        block = format_memories(hits)
        messages.append({"role": "system", "content": block})
        logger.debug("Injected memories", count=len(hits))
        return block

    async def agent_end(self, messages: list[dict[str, Any]]) -> bool:
        """
        Auto-capture hook.

        Stores the latest user message when the capture policy matches it.

        Returns:
            True if a memory was stored
        """
        if not self._config.auto_capture:
            return False

        text = extract_text(last_user_message(messages))
        if not self._policy.should_capture(text):
            return False

        try:
            await self._client.add(text)
        except MemoryClientError as e:
            logger.warning("Memory capture failed", error=str(e))
            return False
        except Exception as e:
            logger.warning("Memory capture failed", error=str(e), exc_info=True)
            return False

        logger.debug("Captured memory", length=len(text))
        return True

    async def memory_recall(self, query: str, limit: int | None = None) -> str:
        """
        Tool: search persistent memory.

        Returns:
            One ``[score] content (id: ...)`` line per hit, or a fixed
            message when nothing matched
        """
        hits = await self._client.search(
            query,
            limit=limit if limit is not None else self._config.recall_limit,
            threshold=self._config.min_score,
        )
        if not hits:
            return NO_MEMORIES

        return "\n".join(
            f"[{float(hit['score']):.3f}] {hit['content']} (id: {hit['id']})" for hit in hits
        )

    async def memory_store(self, content: str) -> str:
        """Tool: store a fact in persistent memory."""
        data = await self._client.add(content)
        return f"Stored (id: {data['id']})."
