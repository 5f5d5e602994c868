"""Registry of hoisted request-template content.

The model transformer finalises its resolvers (auto-generated ids, createdAt
and updatedAt timestamps) in a later pass than the hook compiler runs. It
registers a zero-argument producer per resolver id instead; the compiler
consumes each producer once when it wraps that resolver into a pipeline
function.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

logger = logging.getLogger(__name__)

ContentProducer = Callable[[], "str | None"]


class HoistedContentRegistry:
    """Explicit map of resolver id to one-shot content producer.

    Scoped to one compilation run, passed into the compiler by the caller.
    """

    def __init__(self, producers: dict[str, ContentProducer] | None = None) -> None:
        self._producers: dict[str, ContentProducer] = dict(producers or {})

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._producers

    def __len__(self) -> int:
        return len(self._producers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._producers)

    def register(self, resource_id: str, producer: ContentProducer) -> None:
        """Register a producer for a resolver id, replacing any earlier one."""
        self._producers[resource_id] = producer

    def register_text(self, resource_id: str, text: str) -> None:
        """Register fixed template text for a resolver id."""
        self.register(resource_id, lambda: text)

    def consume(self, resource_id: str) -> str | None:
        """Remove the producer for ``resource_id`` and return what it yields.

        The entry is gone afterwards whether or not the producer yielded text.

        Args:
            resource_id: Resolver id

        Returns:
            Produced text, or None if no producer was registered
        """
        producer = self._producers.pop(resource_id, None)
        if producer is None:
            return None
        content = producer()
        logger.debug("Consumed hoisted content for '%s' (%s)", resource_id, "empty" if not content else "injected")
        return content

    def discard(self, resource_id: str) -> None:
        """Drop any entry for ``resource_id``. Missing ids are ignored."""
        self._producers.pop(resource_id, None)

    def clear(self) -> None:
        self._producers.clear()
