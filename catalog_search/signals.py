"""Single-threaded reactive signals.

Provides the reactive primitive the catalog view state is built on:
writable signals, lazily derived computed values, effects that re-run when
the signals they read change, and watchers that subscribe without running
their callback on construction.

Propagation is synchronous. Notifications raised inside ``batch()`` are
deferred until the outermost batch exits and delivered once per observer.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

T = TypeVar("T")


# ============================================================================
# Dependency Tracking
# ============================================================================


class _Observer:
    """Something that reads signals and wants to hear about their changes."""

    # Eager observers are notified even inside a batch (they only mark themselves stale).
    _eager = False

    def __init__(self) -> None:
        self._sources: set["_Source"] = set()

    def _notify(self) -> None:
        raise NotImplementedError

    def _track(self, fn: Callable[[], T]) -> T:
        """Run fn with this observer collecting the sources it reads."""
        self._unsubscribe_all()
        _observer_stack.append(self)
        try:
            return fn()
        finally:
            _observer_stack.pop()

    def _unsubscribe_all(self) -> None:
        for source in self._sources:
            source._subscribers.pop(self, None)
        self._sources.clear()


class _Source:
    """Something observers can depend on."""

    def __init__(self) -> None:
        # dict keeps subscription order stable across notifications
        self._subscribers: dict[_Observer, None] = {}

    def _register_read(self) -> None:
        observer = _observer_stack[-1] if _observer_stack else None
        if observer is not None:
            self._subscribers[observer] = None
            observer._sources.add(self)

    def _notify_subscribers(self) -> None:
        for observer in list(self._subscribers):
            if _batch_depth and not observer._eager:
                _pending[observer] = None
            else:
                observer._notify()


_observer_stack: list[_Observer | None] = []
_pending: dict[_Observer, None] = {}
_batch_depth = 0


@contextmanager
def batch() -> Iterator[None]:
    """Defer notifications until the outermost batch exits.

    Every observer affected inside the batch is notified exactly once.

    Example:
        with batch():
            limit.set(24)
            cursor.set(None)
    """
    global _batch_depth
    _batch_depth += 1
    try:
        yield
    finally:
        _batch_depth -= 1
        if _batch_depth == 0:
            _flush_pending()


def _flush_pending() -> None:
    while _pending:
        observer = next(iter(_pending))
        del _pending[observer]
        observer._notify()


# ============================================================================
# Signals
# ============================================================================


class Signal(_Source, Generic[T]):
    """Writable reactive value."""

    def __init__(self, value: T) -> None:
        super().__init__()
        self._value = value

    def get(self) -> T:
        """Read the value and subscribe the running observer."""
        self._register_read()
        return self._value

    def peek(self) -> T:
        """Read the value without subscribing."""
        return self._value

    def set(self, value: T) -> None:
        """Replace the value, notifying subscribers if it changed."""
        if value is self._value or value == self._value:
            return
        self._value = value
        self._notify_subscribers()

    def __repr__(self) -> str:
        return f"Signal({self._value!r})"


_STALE: Any = object()


class Computed(_Source, _Observer, Generic[T]):
    """Read-only value derived from other signals.

    Recomputed lazily on the first read after one of its sources changed.
    """

    _eager = True

    def __init__(self, fn: Callable[[], T]) -> None:
        _Source.__init__(self)
        _Observer.__init__(self)
        self._fn = fn
        self._value: T = _STALE

    def get(self) -> T:
        self._register_read()
        return self.peek()

    def peek(self) -> T:
        if self._value is _STALE:
            self._value = self._track(self._fn)
        return self._value

    def _notify(self) -> None:
        if self._value is _STALE:
            return
        self._value = _STALE
        self._notify_subscribers()

    def __repr__(self) -> str:
        return f"Computed({self._value!r})"


class Effect(_Observer):
    """Side effect re-run whenever a signal it read changes."""

    def __init__(self, fn: Callable[[], Any]) -> None:
        super().__init__()
        self._fn = fn
        self._running = False
        self._rerun = False
        self._disposed = False

    def run(self) -> None:
        if self._disposed:
            return
        if self._running:
            self._rerun = True
            return
        self._running = True
        try:
            self._track(self._fn)
            while self._rerun and not self._disposed:
                self._rerun = False
                self._track(self._fn)
        finally:
            self._running = False
            self._rerun = False

    def _notify(self) -> None:
        self.run()

    def dispose(self) -> None:
        """Stop reacting to changes."""
        self._disposed = True
        self._unsubscribe_all()


class Watcher(Effect):
    """Effect whose callback only fires when the watched value changes.

    The source is read at construction so the subscription exists from the
    start, but the callback is not invoked for the initial value.
    """

    def __init__(self, source: Callable[[], T], callback: Callable[[T], Any]) -> None:
        self._source = source
        self._callback = callback
        self._last: Any = _STALE
        super().__init__(self._check)
        self.run()

    def _check(self) -> None:
        value = self._source()
        previous = self._last
        self._last = value
        if previous is _STALE or previous == value:
            return
        # reads made by the callback are not dependencies of the watcher
        untracked(lambda: self._callback(value))


# ============================================================================
# Factories
# ============================================================================


def signal(value: T) -> Signal[T]:
    return Signal(value)


def computed(fn: Callable[[], T]) -> Computed[T]:
    return Computed(fn)


def effect(fn: Callable[[], Any]) -> Effect:
    """Create an effect and run it once to establish its subscriptions."""
    handle = Effect(fn)
    handle.run()
    return handle


def watch(source: Callable[[], T], callback: Callable[[T], Any]) -> Watcher:
    """Subscribe to source() and call callback on every later change."""
    return Watcher(source, callback)


def untracked(fn: Callable[[], T]) -> T:
    """Run fn without subscribing the current observer to what it reads."""
    _observer_stack.append(None)
    try:
        return fn()
    finally:
        _observer_stack.pop()
