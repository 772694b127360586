"""
Defines the types shared by the registry, the cache and the dispatcher.

Endpoints and descriptors are built by callers; match results, cache entries
and settled results are only ever produced by this package.
"""

from dataclasses import dataclass, field
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

FULFILLED = 'fulfilled'
REJECTED = 'rejected'


@dataclass(eq=False)
class Endpoint:
    """
    A virtual endpoint.

    Endpoints compare by identity: the object returned on registration is the
    token used to remove it again.
    """

    method: str
    """
    The upper-cased HTTP method handled by the endpoint. E.g., "GET".
    """

    pattern: Union[str, re.Pattern]
    """
    Either a path template such as "/food/:kind" or a compiled regular
    expression.
    """

    handler: Callable[[Any, Any], Any]
    """
    Called as `handler(req, res)` for every intercepted request.
    """

    matcher: Callable[[str], Any] = field(repr=False, default=None)
    """
    The matcher compiled from `pattern` at registration time.
    """


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Describes one outgoing request. Immutable once dispatched.
    """

    url: str
    method: str = 'GET'
    query: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)
    force_cache: bool = False
    """
    Reuse the last response for this method and url regardless of payload.
    """

    def __post_init__(self):
        object.__setattr__(self, 'method', self.method.upper())

    @property
    def signature(self):
        return (self.method, self.url)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> 'RequestDescriptor':
        """
        Build a descriptor from a plain dict such as `{'url': '/peas'}`.
        """
        body = mapping.get('body', mapping.get('data', mapping.get('json')))
        return cls(url=mapping['url'],
                   method=mapping.get('method', mapping.get('type', 'GET')),
                   query=dict(mapping.get('query', mapping.get('params')) or {}),
                   body=body,
                   headers=dict(mapping.get('headers') or {}),
                   force_cache=bool(mapping.get('force_cache', mapping.get('forceCache', False))))


@dataclass
class MatchResult:
    endpoint: Endpoint
    params: Union[List[Optional[str]], Dict[str, str]]
    """
    Captured groups, in order, for a regular expression; placeholder name to
    segment for a template.
    """


@dataclass
class CacheEntry:
    """
    The last settled response for a method and url.
    """
    request: RequestDescriptor
    response: Any
    version: int
    stored_at: float


@dataclass
class SettledResult:
    """
    The outcome of one item of a dispatch.
    """

    state: str
    value: Any = None
    reason: Optional[BaseException] = None

    @property
    def is_fulfilled(self) -> bool:
        return self.state == FULFILLED

    @classmethod
    def fulfilled(cls, value) -> 'SettledResult':
        return cls(FULFILLED, value=value)

    @classmethod
    def rejected(cls, reason) -> 'SettledResult':
        return cls(REJECTED, reason=reason)
