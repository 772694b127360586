"""
Builds the objects a virtual endpoint's handler works with.

A handler is called as `handler(req, res)`. `req` describes the intercepted
request and lets the handler issue nested requests through the same facade.
`res` produces the reply: exactly one of `send`, `json` or `send_status` must
be called, at which point the future returned by `build` settles with a
`requests.Response` indistinguishable from one received over the network.
"""

from concurrent.futures import Future
from io import BytesIO
import json
import logging
import threading
from typing import Any, Callable, Dict, Mapping, Tuple
from urllib.parse import parse_qsl, urlsplit

import requests
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

from .model import MatchResult, RequestDescriptor
from .util import DataclassJSONEncoder, reason_phrase


logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = 'application/json'
FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'
TEXT_CONTENT_TYPE = 'text/plain; charset=utf-8'


class ResponseAlreadySent(RuntimeError):
    """
    Raised when a handler replies more than once to the same request.
    """


def parse_query(request: RequestDescriptor) -> Dict[str, str]:
    query = dict(parse_qsl(urlsplit(request.url).query, keep_blank_values=True))
    query.update({str(k): str(v) for k, v in request.query.items()})
    return query


def parse_body(request: RequestDescriptor) -> Any:
    """
    Decode the body when its content type says it is structured, otherwise
    pass it through untouched.
    """
    body = request.body
    if not isinstance(body, (str, bytes)):
        return body
    content_type = CaseInsensitiveDict(request.headers).get('Content-Type', '')
    if content_type.startswith(JSON_CONTENT_TYPE):
        text = _text(body)
        return json.loads(text) if text else None
    if content_type.startswith(FORM_CONTENT_TYPE):
        return dict(parse_qsl(_text(body), keep_blank_values=True))
    return body


def _text(body) -> str:
    return body.decode('utf-8') if isinstance(body, bytes) else body


def synthesize_response(request: RequestDescriptor, status: int, headers: Mapping[str, str],
                        body: bytes) -> requests.Response:
    result = requests.Response()
    result.status_code = status
    result.reason = reason_phrase(status)
    result.headers = CaseInsensitiveDict(headers)
    result.headers['Content-Length'] = str(len(body))
    result.encoding = get_encoding_from_headers(result.headers)
    result.raw = BytesIO(body)
    result.url = request.url
    return result


class HandlerRequest:
    def __init__(self, request: RequestDescriptor, params, ajax: Callable[..., Future]) -> None:
        self.method = request.method
        self.url = request.url
        self.headers = CaseInsensitiveDict(request.headers)
        self.params = params
        self.query = parse_query(request)
        self.body = parse_body(request)
        self.ajax = ajax
        self.descriptor = request

    def __repr__(self):
        return '<HandlerRequest {} {}>'.format(self.method, self.url)


class HandlerResponse:
    def __init__(self, request: RequestDescriptor, future: Future) -> None:
        self.__request = request
        self.__future = future
        self.__status = 200
        self.__headers: Dict[str, str] = {}
        self.__lock = threading.Lock()
        self.__sent = False

    @property
    def sent(self) -> bool:
        return self.__sent

    def status(self, code: int) -> 'HandlerResponse':
        """
        Set the status used by the next `send` or `json` call.
        """
        self.__status = code
        return self

    def set(self, header: str, value: str) -> 'HandlerResponse':
        self.__headers[header] = value
        return self

    def send(self, text) -> None:
        if isinstance(text, bytes):
            body = text
        else:
            body = str(text).encode('utf-8')
        self._reply(self.__status, TEXT_CONTENT_TYPE, body)

    def json(self, value) -> None:
        body = json.dumps(value, cls=DataclassJSONEncoder).encode('utf-8')
        self._reply(self.__status, JSON_CONTENT_TYPE, body)

    def send_status(self, code: int) -> None:
        self._reply(code, TEXT_CONTENT_TYPE, reason_phrase(code).encode('utf-8'))

    sendStatus = send_status

    def _reply(self, status: int, content_type: str, body: bytes) -> None:
        with self.__lock:
            if self.__sent:
                logger.warning('Handler replied twice to {} {}'.format(self.__request.method, self.__request.url))
                raise ResponseAlreadySent('A reply was already sent for {} {}'.format(
                    self.__request.method, self.__request.url))
            self.__sent = True

        headers = {'Content-Type': content_type}
        headers.update(self.__headers)
        response = synthesize_response(self.__request, status, headers, body)
        if status >= 400:
            logger.info('Virtual endpoint failed {} {} with {}'.format(
                self.__request.method, self.__request.url, status))
            self.__future.set_exception(requests.HTTPError(
                '{} {}'.format(status, response.reason), response=response))
        else:
            self.__future.set_result(response)


def build(request: RequestDescriptor, match: MatchResult,
          ajax: Callable[..., Future]) -> Tuple[HandlerRequest, HandlerResponse, Future]:
    """
    Build the handler-facing request and response objects.

    The handler is not called here.

    @param request
      The intercepted request.
    @param match
      The registry match that claimed `request`.
    @param ajax
      The dispatch function exposed to the handler as `req.ajax`.
    @return
      `(req, res, future)` where `future` settles when `res` replies.
    """
    future = Future()
    return HandlerRequest(request, match.params, ajax), HandlerResponse(request, future), future
