"""Thread-safe single-flight memoizer."""

import logging
import threading
from collections.abc import Callable, Hashable
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = logging.getLogger(__name__)


class RecursiveBuildError(RuntimeError):
    """Raised when a build function asks for the key it is building."""

    pass


@dataclass
class MemoizerStats:
    """Counters for monitoring a memoizer."""

    hits: int = 0
    misses: int = 0
    builds: int = 0
    failures: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


@dataclass
class _InFlight(Generic[V]):
    future: "Future[V]"
    thread_id: int


class SingleFlightMemoizer(Generic[K, V]):
    """Permanent per-key cache whose build function runs at most once per key.

    Concurrent first-time callers for the same key share one in-flight
    future: the first caller builds, the others wait on the future and get
    the same value (or the same exception). Values are never evicted. A
    failed build is not cached, so the next ``get`` for that key builds again.

    Usage:
        memoizer = SingleFlightMemoizer(build_schema)
        schema = memoizer.get("HIV1")
    """

    def __init__(self, build: Callable[[K], V], name: str = "memoizer") -> None:
        """Initialize the memoizer.

        Args:
            build: Function producing the value of a key; must not modify shared state
            name: Name used in log messages
        """
        self._build = build
        self._name = name
        self._lock = threading.Lock()
        self._values: dict[K, V] = {}
        self._in_flight: dict[K, _InFlight[V]] = {}
        self.stats = MemoizerStats()

    def get(self, key: K) -> V:
        """Return the value of ``key``, building it on first access.

        Raises:
            RecursiveBuildError: If called for ``key`` from inside its own build
            Exception: Whatever the build function raised, for the builder and all waiters
        """
        with self._lock:
            if key in self._values:
                self.stats.hits += 1
                return self._values[key]
            self.stats.misses += 1
            in_flight = self._in_flight.get(key)
            if in_flight is None:
                in_flight = _InFlight(future=Future(), thread_id=threading.get_ident())
                self._in_flight[key] = in_flight
                is_builder = True
            else:
                if in_flight.thread_id == threading.get_ident():
                    raise RecursiveBuildError(
                        f"{self._name}: recursive build of {key!r} from its own build function"
                    )
                is_builder = False

        if not is_builder:
            logger.debug(f"{self._name}: waiting for in-flight build of {key!r}")
            return in_flight.future.result()

        try:
            value = self._build(key)
        except BaseException as e:
            with self._lock:
                del self._in_flight[key]
                self.stats.failures += 1
            in_flight.future.set_exception(e)
            raise

        with self._lock:
            self._values[key] = value
            del self._in_flight[key]
            self.stats.builds += 1
        in_flight.future.set_result(value)
        return value

    def peek(self, key: K) -> V | None:
        """Return the cached value of ``key`` without building it."""
        with self._lock:
            return self._values.get(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._values
