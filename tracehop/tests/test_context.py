"""Tests for the context store and propagation across continuations."""

import asyncio
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor

import pytest

from tracehop.context import (
    XTracePropagator,
    bind,
    capture,
    current,
    enter,
    exit,
    get_inbound_xtrace,
    reset,
    run_with_context,
)
from tracehop.errors import ContextMismatch
from tracehop.tracer.event import Event
from tracehop.tracer.metadata import new_root


def make_event(sampled=True):
    return Event(new_root(sampled))


class TestNesting:
    def test_unset_by_default(self):
        assert current() is None

    def test_nested_enter_exit(self):
        a, b = make_event(), make_event()

        enter(a)
        assert current() is a
        enter(b)
        assert current() is b
        exit(b)
        assert current() is a
        exit(a)
        assert current() is None

    def test_mismatched_exit_raises_and_resets(self):
        a, b = make_event(), make_event()
        enter(a)
        enter(b)

        with pytest.raises(ContextMismatch):
            exit(a)

        assert current() is None
        # The store stays usable after the mismatch.
        c = make_event()
        enter(c)
        assert current() is c
        exit(c)
        assert current() is None

    def test_exit_without_enter(self):
        with pytest.raises(ContextMismatch):
            exit(make_event())
        assert current() is None

    def test_reset(self):
        enter(make_event())
        enter(make_event())
        reset()
        assert current() is None


class TestPropagation:
    def test_deferred_continuation_sees_scheduling_context(self):
        """Two requests interleave on one thread through a manual callback queue."""
        queue = deque()
        seen = {}

        def schedule(name):
            queue.append((name, bind(lambda: seen.__setitem__(name, current()))))

        request_a, request_b = make_event(), make_event()

        enter(request_a)
        schedule("a")
        exit(request_a)

        enter(request_b)
        schedule("b")
        # request_b is still current while a's continuation runs
        name, callback = queue.popleft()
        callback()
        exit(request_b)

        name_b, callback_b = queue.popleft()
        callback_b()

        assert seen["a"] is request_a
        assert seen["b"] is request_b
        assert current() is None

    def test_continuation_restores_caller_context(self):
        a, b = make_event(), make_event()
        enter(a)
        snapshot = capture()
        exit(a)

        enter(b)
        assert run_with_context(snapshot, current) is a
        assert current() is b
        exit(b)

    def test_enter_inside_continuation_does_not_leak(self):
        a = make_event()
        enter(a)
        inner = make_event()

        def continuation():
            enter(inner)
            return current()

        assert bind(continuation)() is inner
        assert current() is a
        exit(a)

    def test_bind_is_idempotent_for_same_snapshot(self):
        snapshot = capture()
        fn = bind(lambda: None, snapshot)
        assert bind(fn, snapshot) is fn

    def test_asyncio_call_soon_interleaving(self):
        results = {}

        async def request(name, delay):
            event = make_event()
            enter(event)
            loop = asyncio.get_running_loop()
            done = loop.create_future()

            def callback():
                results[name] = (current(), event)
                done.set_result(None)

            loop.call_later(delay, bind(callback))
            await done
            exit(event)

        async def main():
            await asyncio.gather(request("slow", 0.02), request("fast", 0.0))

        asyncio.run(main())

        for seen, expected in results.values():
            assert seen is expected

    def test_thread_pool_continuation(self):
        a = make_event()
        enter(a)
        try:
            with ThreadPoolExecutor(max_workers=1) as pool:
                unbound = pool.submit(current).result()
                bound = pool.submit(bind(current)).result()
        finally:
            exit(a)

        assert unbound is None
        assert bound is a

    def test_threads_are_isolated(self):
        a = make_event()
        enter(a)
        seen = []
        thread = threading.Thread(target=lambda: seen.append(current()))
        thread.start()
        thread.join()
        exit(a)

        assert seen == [None]


class TestPropagator:
    def test_extract_is_case_insensitive_and_raw(self):
        propagator = XTracePropagator()
        ctx = propagator.extract({"x-trace": "not decoded here"})

        assert get_inbound_xtrace(ctx) == "not decoded here"
        assert current(ctx) is None

    def test_extract_without_header_keeps_context(self):
        ctx = XTracePropagator().extract({"Accept": "*/*"})
        assert get_inbound_xtrace(ctx) is None

    def test_inject_writes_current_event(self):
        propagator = XTracePropagator()
        headers = {}
        propagator.inject(headers)
        assert headers == {}

        a = make_event()
        enter(a)
        propagator.inject(headers)
        exit(a)

        assert headers == {"X-Trace": str(a)}
        assert propagator.fields == {"X-Trace"}
