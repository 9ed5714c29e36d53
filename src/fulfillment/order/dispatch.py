"""Fire-and-forget execution of side effects that follow an order change.

Commerce sync, customer alerts and audit records must never undo, fail or
delay the change that triggered them. Each effect gets its own lane: a
single worker thread fed by a bounded backlog, so calls for one effect are
applied in the order the changes happened and a slow collaborator can hold
up only its own lane. The caller only queues the call. Failures, timeouts
and calls dropped because the backlog is full are logged and counted per
effect.
"""

import os
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import wait as wait_for_futures

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_PENDING = 100

_lanes: dict = {}
_lanes_lock = threading.Lock()
_pending: set = set()
_pending_lock = threading.Lock()
_failures: Counter = Counter()
_failures_lock = threading.Lock()


def side_effect_timeout() -> float:
    """Seconds one side effect may run (``SIDE_EFFECT_TIMEOUT_SECONDS``)."""
    raw = os.environ.get("SIDE_EFFECT_TIMEOUT_SECONDS")
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid side-effect timeout", value=raw)
        return DEFAULT_TIMEOUT_SECONDS


def max_pending() -> int:
    """Calls a lane may hold, running or queued (``SIDE_EFFECT_MAX_PENDING``)."""
    raw = os.environ.get("SIDE_EFFECT_MAX_PENDING")
    try:
        return max(1, int(raw)) if raw else DEFAULT_MAX_PENDING
    except ValueError:
        logger.warning("Ignoring invalid side-effect backlog size", value=raw)
        return DEFAULT_MAX_PENDING


class _Lane:
    def __init__(self, effect: str):
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"side-effect-{effect}")
        self.slots = threading.BoundedSemaphore(max_pending())


class _Call:
    """Settles exactly once: either it finishes or its timer expires first."""

    def __init__(self, effect: str, timeout: float):
        self.effect = effect
        self.timeout = timeout
        self._lock = threading.Lock()
        self._settled = False

    def settle(self) -> bool:
        with self._lock:
            if self._settled:
                return False
            self._settled = True
            return True


def _lane(effect: str) -> _Lane:
    with _lanes_lock:
        if effect not in _lanes:
            _lanes[effect] = _Lane(effect)
        return _lanes[effect]


def _record_failure(effect: str) -> None:
    with _failures_lock:
        _failures[effect] += 1


def failure_count(effect: str) -> int:
    with _failures_lock:
        return _failures[effect]


def reset_failure_counts() -> None:
    with _failures_lock:
        _failures.clear()


def _expire(call: _Call) -> None:
    if call.settle():
        _record_failure(call.effect)
        logger.error("Side effect timed out", effect=call.effect, timeout_seconds=call.timeout)


def _run(lane: _Lane, call: _Call, fn, args, kwargs) -> None:
    timer = threading.Timer(call.timeout, _expire, args=(call,))
    timer.daemon = True
    timer.start()
    try:
        fn(*args, **kwargs)
    except Exception as exc:
        if call.settle():
            _record_failure(call.effect)
            logger.error(
                "Side effect failed",
                effect=call.effect,
                error=str(exc),
                error_type=type(exc).__name__,
            )
    else:
        call.settle()
    finally:
        timer.cancel()
        lane.slots.release()


def _forget(future) -> None:
    with _pending_lock:
        _pending.discard(future)


def dispatch_best_effort(effect: str, fn, *args, timeout: float | None = None, **kwargs) -> bool:
    """Queue ``fn(*args, **kwargs)`` on the lane for ``effect`` and return at once.

    Returns ``False`` when the call could not be queued because the lane's
    backlog is full. Never raises. Failures and timeouts of queued calls are
    logged and counted against ``effect`` when they happen.
    """
    call = _Call(effect, side_effect_timeout() if timeout is None else timeout)
    lane = _lane(effect)

    if not lane.slots.acquire(blocking=False):
        _record_failure(effect)
        logger.error("Side effect dropped, backlog full", effect=effect)
        return False

    try:
        future = lane.executor.submit(_run, lane, call, fn, args, kwargs)
    except RuntimeError as exc:
        lane.slots.release()
        _record_failure(effect)
        logger.error("Side effect dropped", effect=effect, error=str(exc))
        return False

    with _pending_lock:
        _pending.add(future)
    future.add_done_callback(_forget)
    return True


def wait_for_side_effects(timeout: float | None = None) -> bool:
    """Block until every queued side effect has finished; ``False`` if ``timeout`` ran out first."""
    with _pending_lock:
        futures = set(_pending)
    _, not_done = wait_for_futures(futures, timeout=timeout)
    return not not_done


def shutdown_dispatcher(wait: bool = False) -> None:
    """Stop every lane; new lanes are created on next use."""
    with _lanes_lock:
        lanes = list(_lanes.values())
        _lanes.clear()
    for lane in lanes:
        lane.executor.shutdown(wait=wait)
