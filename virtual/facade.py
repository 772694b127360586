from concurrent.futures import Future, ThreadPoolExecutor
import logging
import threading
from typing import Callable, Optional

import requests

from .adapter import InterceptingHTTPAdapter, RequestsTransport
from .cache import Cache, Comparator, MemoryCache, payload_equal
from .dispatch import Dispatcher, Proxy
from .model import Endpoint
from .registry import Registry


logger = logging.getLogger(__name__)

INTERCEPTED_PREFIXES = ('http://', 'https://')


class Facade:
    """
    Owns a registry of virtual endpoints, a response cache and the session
    whose requests they intercept.

    Interception is installed on construction and removed by `destroy()`.
    Facades share nothing with each other, including with `default()`.
    """

    def __init__(self, session: Optional[requests.Session] = None, proxy: Optional[Proxy] = None,
                 base_url: Optional[str] = None, max_workers: Optional[int] = None,
                 cache: Optional[Cache] = None, match: Comparator = payload_equal) -> None:
        self.session = session if session is not None else requests.Session()
        self.registry = Registry()
        self.cache = cache if cache is not None else MemoryCache(match)
        self.transport = RequestsTransport(base_url=base_url) if proxy is None else None
        self.__executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='virtual')
        self.dispatcher = Dispatcher(self.registry,
                                     self.cache,
                                     self.__executor,
                                     proxy if proxy is not None else self.transport)
        self.__original_adapters = {}
        self.__destroyed = False
        self._install()

    def _install(self) -> None:
        adapter = InterceptingHTTPAdapter(self.dispatcher)
        for prefix in INTERCEPTED_PREFIXES:
            self.__original_adapters[prefix] = self.session.get_adapter(prefix)
            self.session.mount(prefix, adapter)
        logger.info('Installed request interception')

    def _uninstall(self) -> None:
        for prefix, adapter in self.__original_adapters.items():
            self.session.mount(prefix, adapter)
        self.__original_adapters = {}
        logger.info('Restored the original request path')

    @property
    def destroyed(self) -> bool:
        return self.__destroyed

    def add(self, method: str, pattern, handler: Callable) -> Endpoint:
        return self.registry.add(method, pattern, handler)

    create = add

    def route(self, method: str, pattern) -> Callable:
        """
        Decorator form of `add`.
        """
        def decorator(handler):
            self.add(method, pattern, handler)
            return handler
        return decorator

    def remove(self, endpoint: Endpoint) -> None:
        self.registry.remove(endpoint)

    def ajax(self, request_or_list, **options) -> Future:
        """
        Dispatch one or many requests. See `Dispatcher.dispatch`.
        """
        return self.dispatcher.dispatch(request_or_list, **options)

    dispatch = ajax

    def destroy(self) -> None:
        """
        Remove every endpoint and stop intercepting. Calling it again does
        nothing.
        """
        if self.__destroyed:
            return
        self.__destroyed = True
        self.dispatcher.intercepting = False
        self.registry.clear()
        self._uninstall()

    def close(self) -> None:
        self.destroy()
        self.__executor.shutdown(wait=True)
        if self.transport is not None:
            self.transport.close()
        self.session.close()

    def __enter__(self) -> 'Facade':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


_default: Optional[Facade] = None
_default_lock = threading.Lock()


def default() -> Facade:
    """
    Return the process-wide facade, creating it on first use.
    """
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = Facade()
    return _default


def create(base_url: Optional[str] = None, **kw) -> Facade:
    return Facade(base_url=base_url, **kw)
