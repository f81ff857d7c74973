import asyncio
import contextlib
import gc
import inspect
from datetime import datetime, timedelta, timezone

import pytest

from .cookiejar import CookieJar
from .store import MemoryCookieStore


try:
    import uvloop
except ImportError:
    uvloop = None


def setup_test_loop(loop_factory=asyncio.new_event_loop):
    loop = loop_factory()
    asyncio.set_event_loop(None)
    return loop


def teardown_test_loop(loop):
    if not loop.is_closed():
        loop.call_soon(loop.stop)
        loop.run_forever()
        loop.close()
    gc.collect()
    asyncio.set_event_loop(None)


@contextlib.contextmanager
def loop_context(loop_factory=asyncio.new_event_loop):
    loop = setup_test_loop(loop_factory)
    try:
        yield loop
    finally:
        teardown_test_loop(loop)


@contextlib.contextmanager
def _passthrough_loop_context(loop):
    if loop:
        # loop already exists, pass it straight through
        yield loop
    else:
        with loop_context() as loop:
            yield loop


def pytest_pycollect_makeitem(collector, name, obj):
    """
    Fix pytest collecting for coroutines.
    """
    if collector.funcnamefilter(name) and inspect.iscoroutinefunction(obj):
        return list(collector._genfunctions(name, obj))


def pytest_pyfunc_call(pyfuncitem):
    """
    Run coroutines in an event loop instead of a normal function call.
    """
    if inspect.iscoroutinefunction(pyfuncitem.function):
        existing_loop = pyfuncitem.funcargs.get('loop', None)
        with _passthrough_loop_context(existing_loop) as _loop:
            testargs = {arg: pyfuncitem.funcargs[arg]
                        for arg in pyfuncitem._fixtureinfo.argnames}

            task = _loop.create_task(pyfuncitem.obj(**testargs))
            _loop.run_until_complete(task)

        return True


def pytest_addoption(parser):
    parser.addoption("--loop_library", choices=['asyncio', 'uvloop', 'all'],
                     default='asyncio',
                     help=("Used event loop implementation.\n"
                           "asyncio by default.\n"
                           "Available values: asyncio, uvloop, all"))


def pytest_generate_tests(metafunc):
    if 'loop_library' in metafunc.fixturenames:
        loop_library = metafunc.config.option.loop_library
        if loop_library == 'asyncio':
            libs = [asyncio]
        elif loop_library == 'uvloop':
            libs = [uvloop]
        elif loop_library == 'all':
            libs = [asyncio, uvloop]
        else:
            raise RuntimeError('Unsupported --loop_library value')
        if None in libs:
            raise RuntimeError('Not all --loop_library libs are installed.\n'
                               'Try pip install uvloop')
        metafunc.parametrize("loop_library", libs, scope='session')


@pytest.fixture
def loop(loop_library):
    """Event loop instance"""
    with loop_context(loop_library.new_event_loop) as loop:
        yield loop


class FrozenClock:
    """Callable clock for CookieJar(now=...) that only moves when told."""

    def __init__(self, now=None):
        if now is None:
            now = datetime(2021, 6, 9, 12, 0, 0, tzinfo=timezone.utc)
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def frozen_now():
    """Clock fixed at 2021-06-09 12:00:00 UTC"""
    return FrozenClock()


@pytest.fixture
def cookie_jar(frozen_now):
    """CookieJar factory running on the frozen clock"""
    def _create(store=None, **kwargs):
        kwargs.setdefault('now', frozen_now)
        if store is None:
            store = MemoryCookieStore()
        return CookieJar(store, **kwargs)

    return _create
