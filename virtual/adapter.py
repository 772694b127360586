import logging
from typing import Optional
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .dispatch import Dispatcher
from .model import RequestDescriptor


logger = logging.getLogger(__name__)


class InterceptingHTTPAdapter(HTTPAdapter):
    """
    A transport adapter that lets virtual endpoints answer a session's
    requests.

    Requests no endpoint claims are sent for real by `HTTPAdapter`, through
    the dispatcher so that the response cache applies.
    """

    def __init__(self, dispatcher: Dispatcher, *args, **kw) -> None:
        super().__init__(*args, **kw)
        self.dispatcher = dispatcher

    def send(self, requests_request: requests.PreparedRequest, **kw) -> requests.Response:
        request = RequestDescriptor(method=requests_request.method,
                                    url=requests_request.url,
                                    body=requests_request.body,
                                    headers=dict(requests_request.headers))

        outcome = self.dispatcher.dispatch(
            request, proxy_to=lambda _: self.send_for_real(requests_request, **kw)).result()
        if not outcome.is_fulfilled:
            raise outcome.reason

        response = outcome.value
        response.request = requests_request
        response.connection = self
        return response

    def send_for_real(self, requests_request: requests.PreparedRequest, **kw) -> requests.Response:
        response = super().send(requests_request, **kw)
        # Load the body now; a cached response may be replayed many times.
        response.content
        return response


class RequestsTransport:
    """
    The default real-network proxy.

    Performs a `RequestDescriptor` with a plain `requests.Session`. Error
    statuses raise `requests.HTTPError` so they reject like a virtual
    endpoint's `send_status`.
    """

    def __init__(self, session: Optional[requests.Session] = None, base_url: Optional[str] = None) -> None:
        self.session = session if session is not None else requests.Session()
        self.base_url = base_url

    def __call__(self, request: RequestDescriptor) -> requests.Response:
        url = urljoin(self.base_url, request.url) if self.base_url else request.url
        kw = {'params': dict(request.query), 'headers': dict(request.headers)}
        if isinstance(request.body, (dict, list)):
            kw['json'] = request.body
        elif request.body is not None:
            kw['data'] = request.body

        logger.info('Sending {} {}'.format(request.method, url))
        response = self.session.request(request.method, url, **kw)
        response.raise_for_status()
        return response

    def close(self):
        self.session.close()
