"""
streams.py - Push-based streams with shared, replayed views

The SDK is driven by values pushed from outside (new chain state, new price
ticks). Everything that reacts to those pushes is a Stream:

    Stream          - cold stream; each subscribe() runs its producer anew
    BehaviorSubject - hot cell holding a current value; new subscribers get it first
    SharedStream    - one upstream subscription fanned out to many observers,
                      replaying the latest value to late subscribers and
                      releasing the upstream when the last observer leaves
    StreamCache     - shared streams memoised by a canonical argument key

Operators (map, filter, switch_map, combine_latest) run synchronously on the
pushing call, so one push is fully propagated before the next is handled.
No locks are needed: there is no preemption.

One-shot reads are async: Stream.first() registers interest and suspends on
an asyncio future until the next value arrives.

Errors:
    An error terminates the observer that receives it. A subscriber with no
    error handler re-raises into the pushing caller.
"""

from __future__ import annotations
import asyncio
import logging
from collections import deque
from typing import (
    Any, Callable, Deque, Dict, Generic, Hashable, List, Mapping, Optional, TypeVar,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Teardown = Callable[[], None]
OnNext = Callable[[Any], None]
OnError = Callable[[BaseException], None]
OnComplete = Callable[[], None]


# ============================================================================
# SUBSCRIPTIONS
# ============================================================================

class Subscription:
    """Handle returned by subscribe(); unsubscribe() stops delivery to this observer."""

    def __init__(self):
        self.closed = False
        self._teardowns: List[Teardown] = []

    def add(self, teardown: Optional[Teardown]) -> None:
        """Register a teardown; runs immediately if already closed."""
        if teardown is None:
            return
        if self.closed:
            teardown()
        else:
            self._teardowns.append(teardown)

    def unsubscribe(self) -> None:
        if self.closed:
            return
        self.closed = True
        teardowns, self._teardowns = self._teardowns, []
        for teardown in reversed(teardowns):
            teardown()


class Subscriber(Subscription):
    """
    Observer end of one subscription.

    Drops values after close. error() and complete() close the subscriber
    before running the handler, so upstream is released exactly once.
    """

    def __init__(
        self,
        on_next: Optional[OnNext] = None,
        on_error: Optional[OnError] = None,
        on_complete: Optional[OnComplete] = None,
    ):
        super().__init__()
        self._on_next = on_next
        self._on_error = on_error
        self._on_complete = on_complete

    def next(self, value: Any) -> None:
        if not self.closed and self._on_next is not None:
            self._on_next(value)

    def error(self, exc: BaseException) -> None:
        if self.closed:
            return
        handler = self._on_error
        self.unsubscribe()
        if handler is None:
            raise exc
        handler(exc)

    def complete(self) -> None:
        if self.closed:
            return
        handler = self._on_complete
        self.unsubscribe()
        if handler is not None:
            handler()


# ============================================================================
# STREAM
# ============================================================================

class Stream(Generic[T]):
    """
    A cold push stream.

    `producer` is called once per subscription with the Subscriber to feed and
    may return a teardown callable.

    Example:
        def producer(subscriber):
            subscriber.next(1)
            subscriber.next(2)
            subscriber.complete()

        Stream(producer).map(lambda x: x * 10).subscribe(print)   # 10, 20
    """

    def __init__(self, producer: Callable[[Subscriber], Optional[Teardown]]):
        self._producer = producer

    def subscribe(
        self,
        on_next: Optional[OnNext] = None,
        on_error: Optional[OnError] = None,
        on_complete: Optional[OnComplete] = None,
    ) -> Subscription:
        subscriber = Subscriber(on_next, on_error, on_complete)
        try:
            teardown = self._producer(subscriber)
        except Exception as exc:
            if subscriber.closed:
                raise
            subscriber.error(exc)
            return subscriber
        subscriber.add(teardown)
        return subscriber

    # ------------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------------

    def map(self, fn: Callable[[T], R]) -> "Stream[R]":
        """Apply fn to every value; an exception from fn errors the stream."""
        def producer(subscriber: Subscriber) -> Teardown:
            def on_next(value: T) -> None:
                try:
                    result = fn(value)
                except Exception as exc:
                    subscriber.error(exc)
                    return
                subscriber.next(result)

            return self.subscribe(on_next, subscriber.error, subscriber.complete).unsubscribe

        return Stream(producer)

    def filter(self, predicate: Callable[[T], bool]) -> "Stream[T]":
        def producer(subscriber: Subscriber) -> Teardown:
            def on_next(value: T) -> None:
                try:
                    keep = predicate(value)
                except Exception as exc:
                    subscriber.error(exc)
                    return
                if keep:
                    subscriber.next(value)

            return self.subscribe(on_next, subscriber.error, subscriber.complete).unsubscribe

        return Stream(producer)

    def switch_map(self, fn: Callable[[T], "Stream[R]"]) -> "Stream[R]":
        """
        Map each value to an inner stream and follow only the latest one.

        A new outer value unsubscribes the previous inner stream.
        """
        def producer(subscriber: Subscriber) -> Teardown:
            inner: Optional[Subscription] = None
            outer_done = False

            def on_inner_complete() -> None:
                nonlocal inner
                inner = None
                if outer_done:
                    subscriber.complete()

            def on_next(value: T) -> None:
                nonlocal inner
                if inner is not None:
                    inner.unsubscribe()
                    inner = None
                try:
                    stream = fn(value)
                except Exception as exc:
                    subscriber.error(exc)
                    return
                inner = stream.subscribe(subscriber.next, subscriber.error, on_inner_complete)
                if inner.closed:
                    inner = None

            def on_outer_complete() -> None:
                nonlocal outer_done
                outer_done = True
                if inner is None:
                    subscriber.complete()

            outer = self.subscribe(on_next, subscriber.error, on_outer_complete)

            def teardown() -> None:
                outer.unsubscribe()
                if inner is not None:
                    inner.unsubscribe()

            return teardown

        return Stream(producer)

    def share_replay(self) -> "SharedStream[T]":
        return SharedStream(self)

    # ------------------------------------------------------------------------
    # One-shot
    # ------------------------------------------------------------------------

    async def first(self) -> T:
        """
        Wait for the next value (or the replayed latest one) and return it.

        Raises whatever error terminates the stream first, and LookupError if
        the stream completes without a value.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def on_next(value: T) -> None:
            if not future.done():
                future.set_result(value)

        def on_error(exc: BaseException) -> None:
            if not future.done():
                future.set_exception(exc)

        def on_complete() -> None:
            if not future.done():
                future.set_exception(LookupError("stream completed without a value"))

        subscription = self.subscribe(on_next, on_error, on_complete)
        try:
            return await future
        finally:
            subscription.unsubscribe()


# ============================================================================
# SOURCES
# ============================================================================

def of(*values: Any) -> Stream[Any]:
    """Emit `values` synchronously, then complete."""
    def producer(subscriber: Subscriber) -> None:
        for value in values:
            subscriber.next(value)
        subscriber.complete()

    return Stream(producer)


class Subject(Stream[T]):
    """
    Hot multicast source; values pushed with next() go to current subscribers.

    Notifications are delivered one at a time. A push made by an observer
    while a value is still being delivered is queued and handed out once
    every subscriber has received the current one.
    """

    def __init__(self):
        super().__init__(self._attach)
        self._subscribers: List[Subscriber] = []
        self._error: Optional[BaseException] = None
        self._completed = False
        self._pending: Deque[Callable[[], None]] = deque()
        self._delivering = False

    def _replay(self, subscriber: Subscriber) -> None:
        """Hook for subjects that hand new subscribers a stored value."""

    def _store(self, value: T) -> None:
        """Hook run as `value` starts going out to subscribers."""

    def _attach(self, subscriber: Subscriber) -> Optional[Teardown]:
        if self._error is not None:
            subscriber.error(self._error)
            return None
        if self._completed:
            self._replay(subscriber)
            subscriber.complete()
            return None
        self._subscribers.append(subscriber)
        self._replay(subscriber)
        return lambda: self._detach(subscriber)

    def _detach(self, subscriber: Subscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    @property
    def observer_count(self) -> int:
        return len(self._subscribers)

    @property
    def is_stopped(self) -> bool:
        return self._error is not None or self._completed

    def _dispatch(self, notify: Callable[[], None]) -> None:
        self._pending.append(notify)
        if self._delivering:
            return
        self._delivering = True
        try:
            while self._pending:
                self._pending.popleft()()
        finally:
            self._delivering = False
            # an unhandled error abandons whatever was queued behind it
            self._pending.clear()

    def next(self, value: T) -> None:
        if self.is_stopped:
            return
        self._dispatch(lambda: self._deliver_next(value))

    def _deliver_next(self, value: T) -> None:
        if self.is_stopped:
            return
        self._store(value)
        for subscriber in list(self._subscribers):
            subscriber.next(value)

    def error(self, exc: BaseException) -> None:
        """Deliver `exc` to every subscriber; the first unhandled re-raise wins."""
        if self.is_stopped:
            return
        self._dispatch(lambda: self._deliver_error(exc))

    def _deliver_error(self, exc: BaseException) -> None:
        if self.is_stopped:
            return
        self._error = exc
        subscribers, self._subscribers = self._subscribers, []
        unhandled: Optional[BaseException] = None
        for subscriber in subscribers:
            try:
                subscriber.error(exc)
            except Exception as raised:
                unhandled = unhandled or raised
        if unhandled is not None:
            raise unhandled

    def complete(self) -> None:
        if self.is_stopped:
            return
        self._dispatch(self._deliver_complete)

    def _deliver_complete(self) -> None:
        if self.is_stopped:
            return
        self._completed = True
        subscribers, self._subscribers = self._subscribers, []
        for subscriber in subscribers:
            subscriber.complete()


class BehaviorSubject(Subject[T]):
    """Subject with a current value, delivered first to every new subscriber."""

    def __init__(self, initial: T):
        super().__init__()
        self._value = initial

    @property
    def value(self) -> T:
        return self._value

    def _replay(self, subscriber: Subscriber) -> None:
        subscriber.next(self._value)

    def _store(self, value: T) -> None:
        self._value = value


class ReplaySubject(Subject[T]):
    """Subject that replays its latest value, if any, to new subscribers."""

    _EMPTY = object()

    def __init__(self):
        super().__init__()
        self._latest: Any = self._EMPTY

    @property
    def has_value(self) -> bool:
        return self._latest is not self._EMPTY

    @property
    def value(self) -> T:
        if not self.has_value:
            raise LookupError("no value yet")
        return self._latest

    def _replay(self, subscriber: Subscriber) -> None:
        if self.has_value:
            subscriber.next(self._latest)

    def _store(self, value: T) -> None:
        self._latest = value


# ============================================================================
# COMBINATION
# ============================================================================

def combine_latest(streams: Mapping[str, Stream[Any]]) -> Stream[Dict[str, Any]]:
    """
    Emit a dict of the latest value of every stream whenever any of them emits.

    Nothing is emitted until every stream has produced a value. Completes once
    every stream has completed; the first error errors the combined stream.
    """
    keys = list(streams)

    def producer(subscriber: Subscriber) -> Teardown:
        latest: Dict[str, Any] = {}
        completed: set = set()
        subscriptions: List[Subscription] = []

        def make_on_next(key: str) -> OnNext:
            def on_next(value: Any) -> None:
                latest[key] = value
                if len(latest) == len(keys):
                    subscriber.next({k: latest[k] for k in keys})
            return on_next

        def make_on_complete(key: str) -> OnComplete:
            def on_complete() -> None:
                completed.add(key)
                if len(completed) == len(keys):
                    subscriber.complete()
            return on_complete

        for key in keys:
            if subscriber.closed:
                break
            subscriptions.append(
                streams[key].subscribe(make_on_next(key), subscriber.error, make_on_complete(key))
            )

        def teardown() -> None:
            for subscription in subscriptions:
                subscription.unsubscribe()

        return teardown

    return Stream(producer)


# ============================================================================
# SHARING
# ============================================================================

class SharedStream(Stream[T]):
    """
    Reference-counted multicast of a source stream with latest-value replay.

    The first subscriber connects to the source. Later subscribers attach to
    the same connection and immediately receive the latest value. Every
    observer sees values in the same order. When the last observer
    unsubscribes, the source subscription is released and the replayed value
    is dropped; the next subscriber reconnects.

    A source error is delivered to every observer and resets the share.

    An owner may set on_connect and on_release; they run when the share
    connects and when it lets go of its source (last observer gone or
    source error).
    """

    def __init__(self, source: Stream[T]):
        super().__init__(self._attach)
        self._source = source
        self._subject: Optional[ReplaySubject[T]] = None
        self._connection: Optional[Subscription] = None
        self.on_connect: Optional[Callable[[], None]] = None
        self.on_release: Optional[Callable[[], None]] = None

    @property
    def observer_count(self) -> int:
        return self._subject.observer_count if self._subject is not None else 0

    @property
    def is_connected(self) -> bool:
        return self._subject is not None

    def _attach(self, subscriber: Subscriber) -> Teardown:
        subject = self._subject
        if subject is None:
            subject = self._subject = ReplaySubject()
            if self.on_connect is not None:
                self.on_connect()
            inner = subject.subscribe(subscriber.next, subscriber.error, subscriber.complete)
            self._connect(subject)
        else:
            inner = subject.subscribe(subscriber.next, subscriber.error, subscriber.complete)
        return lambda: self._detach(subject, inner)

    def _connect(self, subject: ReplaySubject[T]) -> None:
        logger.debug("shared stream %s connecting", id(self))

        def on_error(exc: BaseException) -> None:
            if self._reset(subject):
                self._released()
            subject.error(exc)

        connection = self._source.subscribe(subject.next, on_error, subject.complete)
        if self._subject is subject:
            self._connection = connection
        else:
            connection.unsubscribe()

    def _detach(self, subject: ReplaySubject[T], inner: Subscription) -> None:
        inner.unsubscribe()
        if self._subject is subject and subject.observer_count == 0:
            connection = self._connection
            self._reset(subject)
            if connection is not None:
                connection.unsubscribe()
            logger.debug("shared stream %s released", id(self))
            self._released()

    def _reset(self, subject: ReplaySubject[T]) -> bool:
        if self._subject is subject:
            self._subject = None
            self._connection = None
            return True
        return False

    def _released(self) -> None:
        if self.on_release is not None:
            self.on_release()


class StreamCache(Generic[T]):
    """
    Shared streams memoised by key.

    Callers canonicalise their arguments into a hashable key; all requests for
    the same key get the same SharedStream and therefore one upstream
    computation.

    An entry is evicted when its stream is released. A caller still holding
    an evicted stream can subscribe again; it re-registers under its key
    unless a newer stream already took that key.
    """

    def __init__(self):
        self._streams: Dict[Hashable, SharedStream[Any]] = {}

    def get(self, key: Hashable, factory: Callable[[], Stream[Any]]) -> SharedStream[Any]:
        shared = self._streams.get(key)
        if shared is None:
            shared = self._streams[key] = factory().share_replay()
            shared.on_connect = lambda: self._streams.setdefault(key, shared)
            shared.on_release = lambda: self._evict(key, shared)
        return shared

    def _evict(self, key: Hashable, shared: SharedStream[Any]) -> None:
        if self._streams.get(key) is shared:
            del self._streams[key]
            logger.debug("stream cache evicted %r", key)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._streams

    def __len__(self) -> int:
        return len(self._streams)
