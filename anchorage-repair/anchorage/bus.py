import asyncio
from collections import defaultdict
from typing import Any, AsyncIterator, Dict, List


class AsyncTopicBroker:
    """Fan-out of topic messages to asyncio queues.

    All calls happen on the event loop thread, so the topic table needs no lock.
    ``publish_nowait`` lets synchronous callbacks (timer listeners) publish.
    """

    def __init__(self) -> None:
        self._topics: Dict[str, List[asyncio.Queue]] = defaultdict(list)

    def publish_nowait(self, topic: str, message: Any) -> int:
        delivered = 0
        for q in list(self._topics.get(topic, [])):
            if not q.full():
                q.put_nowait(message)
                delivered += 1
        return delivered

    async def publish(self, topic: str, message: Any) -> int:
        return self.publish_nowait(topic, message)

    async def subscribe(self, topic: str, max_queue: int = 100) -> AsyncIterator[Any]:
        queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue)
        self._topics[topic].append(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            if queue in self._topics[topic]:
                self._topics[topic].remove(queue)


TIMERS_TOPIC = "tick:timers"

BUS = AsyncTopicBroker()
