from abc import ABC, abstractmethod
import itertools
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from .model import CacheEntry, RequestDescriptor


logger = logging.getLogger(__name__)

Comparator = Callable[[RequestDescriptor, RequestDescriptor], bool]


def payload_equal(previous: RequestDescriptor, current: RequestDescriptor) -> bool:
    """
    The default comparator: bodies and query parameters are equal by value.
    """
    return previous.body == current.body and dict(previous.query) == dict(current.query)


def is_cacheable(response: Any) -> bool:
    """
    Only responses without an error status are worth replaying. Values that
    carry no status at all are always cacheable.
    """
    status = getattr(response, 'status_code', None)
    return status is None or status < 400


class Cache(ABC):
    """
    An abstraction of a response cache.

    A response cache has a relatively narrow scope: to remember the last
    response for a method and url so that it can be recalled for a later
    request. There is no expiry; entries are replaced, never aged out.
    """

    @abstractmethod
    def lookup(self, request: RequestDescriptor, force: bool = False,
               match: Optional[Comparator] = None) -> Optional[CacheEntry]:
        """
        Retrieve the cached response for `request`.

        @param request
          The request to look up in the cache.
        @param force
          Ignore the payload and reuse whatever was last cached for the
          request's method and url.
        @param match
          Overrides the cache's comparator for this lookup. Receives the
          previously cached request and `request`.
        @return
          A cache entry, or `None` on a miss.
        """

    @abstractmethod
    def store(self, request: RequestDescriptor, response: Any) -> CacheEntry:
        """
        Store a response, overwriting any previous entry for the same method
        and url.
        """

    @abstractmethod
    def delete(self, request: RequestDescriptor) -> None:
        """
        Delete the entry for the request's method and url, if any.
        """

    def clear(self) -> None:
        """
        Drop every entry.
        """


class MemoryCache(Cache):
    def __init__(self, match: Comparator = payload_equal) -> None:
        self.__match = match
        self.__entries: Dict[Tuple[str, str], CacheEntry] = {}
        self.__versions = itertools.count(1)
        self.__lock = threading.Lock()

    def lookup(self, request: RequestDescriptor, force: bool = False,
               match: Optional[Comparator] = None) -> Optional[CacheEntry]:
        with self.__lock:
            entry = self.__entries.get(request.signature)
        if entry is None:
            logger.info('Cache miss for {} {}'.format(*request.signature))
            return None
        if force:
            logger.info('Forced cache hit for {} {}'.format(*request.signature))
            return entry

        comparator = match if match is not None else self.__match
        if not comparator(entry.request, request):
            logger.info('Cache entry for {} {} rejected by the comparator'.format(*request.signature))
            return None
        logger.info('Cache hit for {} {}'.format(*request.signature))
        return entry

    def store(self, request: RequestDescriptor, response: Any) -> CacheEntry:
        with self.__lock:
            entry = CacheEntry(request=request,
                               response=response,
                               version=next(self.__versions),
                               stored_at=time.time())
            self.__entries[request.signature] = entry
        logger.info('Stored cache entry {} for {} {}'.format(entry.version, *request.signature))
        return entry

    def delete(self, request: RequestDescriptor) -> None:
        with self.__lock:
            self.__entries.pop(request.signature, None)

    def clear(self) -> None:
        with self.__lock:
            self.__entries.clear()

    def __len__(self) -> int:
        with self.__lock:
            return len(self.__entries)
