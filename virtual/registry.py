import logging
import threading
from typing import Callable, Iterator, List, Optional

from .model import Endpoint, MatchResult
from .pattern import compile_pattern, match, path_of


logger = logging.getLogger(__name__)


class Registry:
    """
    An ordered collection of virtual endpoints.

    Resolution walks the endpoints in registration order, so an endpoint that
    overlaps an earlier one is shadowed rather than rejected.
    """

    def __init__(self) -> None:
        self.__endpoints: List[Endpoint] = []
        self.__lock = threading.Lock()

    def add(self, method: str, pattern, handler: Callable) -> Endpoint:
        endpoint = Endpoint(method=method.upper(),
                            pattern=pattern,
                            handler=handler,
                            matcher=compile_pattern(pattern))
        with self.__lock:
            self.__endpoints.append(endpoint)
        logger.info('Registered virtual endpoint {} {}'.format(endpoint.method, pattern))
        return endpoint

    def remove(self, endpoint: Endpoint) -> None:
        with self.__lock:
            # Identity, not equality: two endpoints may share method and pattern.
            remaining = [e for e in self.__endpoints if e is not endpoint]
            removed = len(remaining) != len(self.__endpoints)
            self.__endpoints = remaining
        if removed:
            logger.info('Removed virtual endpoint {} {}'.format(endpoint.method, endpoint.pattern))

    def clear(self) -> None:
        with self.__lock:
            self.__endpoints = []

    def resolve(self, method: str, url: str) -> Optional[MatchResult]:
        """
        Find the endpoint claiming a request.

        @param method
          The HTTP method of the request, in any case.
        @param url
          A full URL or a bare path. Only the path is matched.
        @return
          The first match in registration order, or `None`.
        """
        path = path_of(url)
        for endpoint in self:
            result = match(endpoint, method, path)
            if result is not None:
                logger.info('{} {} claimed by virtual endpoint {}'.format(method, path, endpoint.pattern))
                return result
        logger.info('No virtual endpoint claims {} {}'.format(method, path))
        return None

    def __iter__(self) -> Iterator[Endpoint]:
        with self.__lock:
            snapshot = list(self.__endpoints)
        return iter(snapshot)

    def __len__(self) -> int:
        with self.__lock:
            return len(self.__endpoints)

    def __contains__(self, endpoint) -> bool:
        return any(e is endpoint for e in self)
