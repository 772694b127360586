from concurrent.futures import Executor, Future, InvalidStateError
from copy import copy
import logging
from typing import Any, Callable, Mapping, Optional, Sequence

from . import context
from .cache import Cache, Comparator, is_cacheable
from .model import MatchResult, RequestDescriptor
from .registry import Registry
from .util import all_settled, rejected, resolved, then


logger = logging.getLogger(__name__)

Aggregator = Callable[[Sequence[Future]], Future]
Proxy = Callable[[RequestDescriptor], Any]


def as_descriptor(item) -> Optional[RequestDescriptor]:
    """
    Interpret a dispatch item as a request, or return `None` for a value that
    should pass through untouched.
    """
    if isinstance(item, RequestDescriptor):
        return item
    if isinstance(item, Mapping) and 'url' in item:
        return RequestDescriptor.from_mapping(item)
    return None


class Dispatcher:
    """
    Sends one or many requests and combines their outcomes.

    Each request is answered, in order of preference, by a virtual endpoint,
    by the response cache, or by the real-network proxy.
    """

    def __init__(self, registry: Registry, cache: Cache, executor: Executor, proxy: Proxy,
                 cacheable: Callable[[Any], bool] = is_cacheable) -> None:
        self.registry = registry
        self.cache = cache
        self.proxy = proxy
        self.cacheable = cacheable
        self.intercepting = True
        self.__executor = executor

    def dispatch(self, requests, aggregator: Optional[Aggregator] = None, proxy_to: Optional[Proxy] = None,
                 match: Optional[Comparator] = None, force_cache: bool = False) -> Future:
        """
        Dispatch a request or a list of items.

        @param requests
          A `RequestDescriptor`, a dict with a "url" key, or a list mixing
          those with arbitrary values. Values that are not requests settle as
          fulfilled with themselves.
        @param aggregator
          Combines the per-item futures. Defaults to `all_settled`.
        @param proxy_to
          Replaces the real-network proxy for this call.
        @param match
          Replaces the cache comparator for this call.
        @param force_cache
          Reuse any cached response for the same method and url regardless of
          payload.
        @return
          A future of the aggregated outcome: a list in input order for a
          list, a single outcome otherwise.
        """
        single = not isinstance(requests, (list, tuple))
        items = [requests] if single else list(requests)
        futures = [self._dispatch_one(item, proxy_to, match, force_cache) for item in items]
        aggregate = (aggregator or all_settled)(futures)
        if single:
            return then(aggregate, lambda outcomes: outcomes[0])
        return aggregate

    __call__ = dispatch

    def invoke(self, request: RequestDescriptor, match: MatchResult) -> Future:
        """
        Run the handler of a matched endpoint.

        @return
          A future settling when the handler replies, or rejected with whatever
          the handler raised before replying. A body that cannot be decoded
          rejects without calling the handler.
        """
        try:
            req, res, future = context.build(request, match, self.dispatch)
        except Exception as e:
            logger.info('Could not build the handler context for {} {}: {}'.format(request.method, request.url, e))
            return rejected(e)
        logger.info('Invoking virtual endpoint {} {}'.format(match.endpoint.method, match.endpoint.pattern))
        try:
            match.endpoint.handler(req, res)
        except Exception as e:
            try:
                future.set_exception(e)
            except InvalidStateError:
                logger.exception('Virtual endpoint {} {} raised after replying'.format(
                    match.endpoint.method, match.endpoint.pattern))
        return future

    def _dispatch_one(self, item, proxy_to: Optional[Proxy], match: Optional[Comparator],
                      force_cache: bool) -> Future:
        request = as_descriptor(item)
        if request is None:
            return resolved(item)

        if self.intercepting:
            found = self.registry.resolve(request.method, request.url)
            if found is not None:
                return self.invoke(request, found)

        entry = self.cache.lookup(request, force=force_cache or request.force_cache, match=match)
        if entry is not None:
            # Each caller gets its own copy of the cached response.
            return resolved(copy(entry.response))

        logger.info('Proxying {} {} to the network'.format(request.method, request.url))
        return self.__executor.submit(self._proxy, proxy_to or self.proxy, request)

    def _proxy(self, proxy: Proxy, request: RequestDescriptor):
        response = proxy(request)
        if isinstance(response, Future):
            response = response.result()
        if self.cacheable(response):
            self.cache.store(request, response)
        else:
            logger.info('Not caching the response to {} {}'.format(request.method, request.url))
        return response
