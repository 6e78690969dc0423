"""In-process shared state store."""

import asyncio
import copy
import logging
from typing import Callable, Dict, List

from light_helpers import merge_state
from models import LightState

logger = logging.getLogger(__name__)

RecordCallback = Callable[[LightState], None]


class Subscription:
    """Handle returned by Record.subscribe."""

    def __init__(self, store: "StateStore", name: str, callback: RecordCallback):
        self.store = store
        self.name = name
        self.callback = callback
        self.active = True

    def discard(self):
        """Stop receiving change notifications."""
        if not self.active:
            return
        self.active = False
        self.store._remove_subscription(self)


class Record:
    """
    A named JSON-like document in the store.

    Several handles may refer to the same name; they share the document but
    discard() only drops the subscriptions made through this handle.
    """

    def __init__(self, store: "StateStore", name: str):
        self.store = store
        self.name = name
        self._subscriptions: List[Subscription] = []

    def get(self) -> LightState:
        """Snapshot of the current document."""
        return copy.deepcopy(self.store._data.get(self.name, {}))

    def set(self, patch: LightState):
        """Merge patch into the document; None values delete fields."""
        current = self.store._data.get(self.name, {})
        self.store._write(self.name, merge_state(current, copy.deepcopy(patch)))

    @property
    def revision(self) -> int:
        """Store-wide write counter at the last write, 0 if never written."""
        return self.store._revisions.get(self.name, 0)

    def replace(self, document: LightState):
        """Overwrite the document in one write; None values are left out."""
        self.store._write(self.name, merge_state({}, copy.deepcopy(document)))

    def clear(self):
        """Replace the document with an empty one."""
        self.store._write(self.name, {})

    def subscribe(self, callback: RecordCallback, emit_initial: bool = False) -> Subscription:
        subscription = self.store._add_subscription(self.name, callback)
        self._subscriptions.append(subscription)
        if emit_initial:
            self.store._schedule(subscription, self.get())
        return subscription

    async def when_ready(self):
        await self.store.ready.wait()

    def discard(self):
        for subscription in self._subscriptions:
            subscription.discard()
        self._subscriptions.clear()


class StateStore:
    """
    Holds one record per key and notifies subscribers on change.

    Notifications are delivered through the running event loop, never from
    inside Record.set, so a handler always completes before another one runs.
    """

    def __init__(self):
        self._data: Dict[str, LightState] = {}
        self._revisions: Dict[str, int] = {}
        self._revision = 0
        self._subscribers: Dict[str, List[Subscription]] = {}
        self.ready = asyncio.Event()
        self.ready.set()

    def get_record(self, name: str) -> Record:
        return Record(self, name)

    def _write(self, name: str, data: LightState):
        self._revision += 1
        self._data[name] = data
        self._revisions[name] = self._revision
        logger.debug(f"Record {name} updated: {data}")
        for subscription in list(self._subscribers.get(name, [])):
            self._schedule(subscription, copy.deepcopy(data))

    def _schedule(self, subscription: Subscription, data: LightState):
        asyncio.get_running_loop().call_soon(self._deliver, subscription, data)

    @staticmethod
    def _deliver(subscription: Subscription, data: LightState):
        if not subscription.active:
            return
        try:
            subscription.callback(data)
        except Exception as e:
            logger.error(f"Subscriber of {subscription.name} failed: {e}", exc_info=True)

    def _add_subscription(self, name: str, callback: RecordCallback) -> Subscription:
        subscription = Subscription(self, name, callback)
        self._subscribers.setdefault(name, []).append(subscription)
        return subscription

    def _remove_subscription(self, subscription: Subscription):
        subscribers = self._subscribers.get(subscription.name, [])
        if subscription in subscribers:
            subscribers.remove(subscription)
