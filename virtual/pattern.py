import re
from typing import Callable, Dict, List, Optional, Union
from urllib.parse import urlsplit

from .model import Endpoint, MatchResult

PLACEHOLDER_MARKER = ':'

Params = Union[List[Optional[str]], Dict[str, str]]


def path_of(url: str) -> str:
    """
    Return the path component of a full URL or of a bare path.
    """
    return urlsplit(url).path or '/'


def _regex_matcher(regex: re.Pattern) -> Callable[[str], Optional[Params]]:
    def matcher(path: str) -> Optional[Params]:
        found = regex.search(path)
        if found is None:
            return None
        # Unmatched optional groups stay as `None` so indices are preserved.
        return list(found.groups())
    return matcher


def _template_matcher(template: str) -> Callable[[str], Optional[Params]]:
    segments = template.split('/')

    def matcher(path: str) -> Optional[Params]:
        parts = path.split('/')
        if len(parts) != len(segments):
            return None
        params = {}
        for segment, part in zip(segments, parts):
            if segment.startswith(PLACEHOLDER_MARKER):
                if not part:
                    return None
                params[segment[len(PLACEHOLDER_MARKER):]] = part
            elif segment != part:
                return None
        return params
    return matcher


def compile_pattern(pattern: Union[str, re.Pattern]) -> Callable[[str], Optional[Params]]:
    """
    Turn a route pattern into a matcher function.

    @param pattern
      A compiled regular expression, or a path template in which segments
      starting with ":" are placeholders. A template without placeholders only
      matches its literal text.
    @return
      A function taking a path and returning the captured parameters, or
      `None` when the path does not match.
    @throws TypeError
      If `pattern` is neither a string nor a regular expression.
    """
    if isinstance(pattern, re.Pattern):
        return _regex_matcher(pattern)
    if isinstance(pattern, str):
        return _template_matcher(pattern)
    raise TypeError('Unsupported route pattern: {!r}'.format(pattern))


def match(endpoint: Endpoint, method: str, path: str) -> Optional[MatchResult]:
    if endpoint.method != method.upper():
        return None
    params = endpoint.matcher(path)
    if params is None:
        return None
    return MatchResult(endpoint=endpoint, params=params)
