from concurrent.futures import Future
import dataclasses
import http.client
import json
import threading
from typing import Any, Callable, List, Sequence

from .model import SettledResult


class DataclassJSONEncoder(json.JSONEncoder):
    def default(self, o):
        if dataclasses.is_dataclass(o):
            return dataclasses.asdict(o)
        return super().default(o)


def reason_phrase(status: int) -> str:
    return http.client.responses.get(status, 'Unknown')


def resolved(value) -> Future:
    future = Future()
    future.set_result(value)
    return future


def rejected(reason: BaseException) -> Future:
    future = Future()
    future.set_exception(reason)
    return future


def settle(future: Future) -> SettledResult:
    """
    Wrap the outcome of a finished future.
    """
    reason = future.exception()
    if reason is not None:
        return SettledResult.rejected(reason)
    return SettledResult.fulfilled(future.result())


def _when_all_done(futures: Sequence[Future], on_done: Callable[[Future], None],
                   on_complete: Callable[[], None]) -> None:
    remaining = [len(futures)]
    lock = threading.Lock()

    def callback(future):
        on_done(future)
        with lock:
            remaining[0] -= 1
            finished = remaining[0] == 0
        if finished:
            on_complete()

    if not futures:
        on_complete()
    for future in futures:
        future.add_done_callback(callback)


def all_settled(futures: Sequence[Future]) -> Future:
    """
    Combine futures into one resolving to their `SettledResult`s, in input
    order, once every future has finished. Never rejects.
    """
    aggregate = Future()
    _when_all_done(futures,
                   lambda future: None,
                   lambda: aggregate.set_result([settle(f) for f in futures]))
    return aggregate


def all_or_fail(futures: Sequence[Future]) -> Future:
    """
    Combine futures into one resolving to their values, in input order, or
    rejecting with the first failure.
    """
    aggregate = Future()
    lock = threading.Lock()

    def on_done(future):
        reason = future.exception()
        if reason is None:
            return
        with lock:
            if aggregate.done():
                return
            aggregate.set_exception(reason)

    def on_complete():
        with lock:
            if aggregate.done():
                return
            aggregate.set_result([f.result() for f in futures])

    _when_all_done(futures, on_done, on_complete)
    return aggregate


def then(future: Future, fn: Callable[[Any], Any]) -> Future:
    """
    Chain `fn` over the result of `future`. Failures of either propagate to
    the returned future.
    """
    chained = Future()

    def callback(done):
        try:
            chained.set_result(fn(done.result()))
        except BaseException as e:
            chained.set_exception(e)

    future.add_done_callback(callback)
    return chained


def spread(settled: List[Any], callback: Callable[..., Any]) -> Any:
    """
    Call `callback` with the ordered settled results as positional arguments.
    """
    return callback(*settled)
