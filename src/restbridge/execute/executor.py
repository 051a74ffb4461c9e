"""
RestBridge Request Executor

Sends resolved requests over HTTP and records history entries.
"""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..common.config import EngineConfig
from ..models import (
    ApiRequest,
    ApiResponse,
    Collection,
    FormDataBody,
    HistoryEntry,
    KeyValue,
    RequestAuth,
)
from ..resolve.auth import resolve_effective_auth
from ..resolve.http_call import prepare_http_call
from ..resolve.variables import resolve_request_variables


logger = logging.getLogger("restbridge.execute")


def error_response(message: str, time_ms: int = 0) -> ApiResponse:
    """Response recorded when the call never completed."""
    body = json.dumps({'error': message})
    return ApiResponse(
        status=0,
        status_text='Error',
        headers={},
        body=body,
        time_ms=time_ms,
        size=len(body.encode('utf-8')),
    )


class RequestExecutor:
    """
    Execute requests with retry handling.

    Features:
    - Variables and inherited auth resolved exactly as in generated code
    - Retries on 429/5xx with exponential backoff
    - Transport failures reported as status 0 responses, never raised
    - Concurrent execution of a whole collection

    Example:
        executor = RequestExecutor(EngineConfig(timeout=10))
        response = executor.execute(request, collection.variables, environment.variables)
        print(response.status, response.body)
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Initialize executor.

        Args:
            config: Engine config supplying timeout, SSL and retry settings
        """
        self.config = config or EngineConfig()
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create HTTP session with retry configuration."""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.config.max_retries,
            backoff_factor=0.5,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
            raise_on_status=False
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def execute(
        self,
        request: ApiRequest,
        collection_variables: Optional[Iterable[KeyValue]] = None,
        environment_variables: Optional[Iterable[KeyValue]] = None,
        inherited_auth: Optional[RequestAuth] = None
    ) -> ApiResponse:
        """
        Send a request.

        Args:
            request: Request to send
            collection_variables: Collection variables
            environment_variables: Environment variables (take precedence)
            inherited_auth: Auth to apply when the request inherits

        Returns:
            ApiResponse; status 0 with an {"error": ...} body if the call failed
        """
        call = prepare_http_call(request, collection_variables, environment_variables, inherited_auth)

        data = None
        files = None
        if call.body_kind == FormDataBody.kind:
            # requests builds the multipart body and boundary
            files = [(key, (None, value)) for key, value in call.form_fields]
        elif call.body_text is not None:
            data = call.body_text.encode('utf-8')

        logger.debug(f"{call.method} {call.url}")
        start_time = time.time()

        try:
            response = self.session.request(
                method=call.method,
                url=call.url,
                headers=dict(call.headers),
                data=data,
                files=files,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
                allow_redirects=self.config.follow_redirects
            )
        except (requests.RequestException, ValueError) as e:
            elapsed_ms = int((time.time() - start_time) * 1000)
            logger.warning(f"{call.method} {call.url} failed: {e}")
            return error_response(str(e), elapsed_ms)

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"{call.method} {call.url} -> {response.status_code} in {elapsed_ms}ms")

        return ApiResponse(
            status=response.status_code,
            status_text=response.reason or '',
            headers=dict(response.headers),
            body=response.text,
            time_ms=elapsed_ms,
            size=len(response.content),
        )

    def execute_collection(
        self,
        collection: Collection,
        environment_variables: Optional[Iterable[KeyValue]] = None,
        max_workers: int = 5
    ) -> List[Tuple[ApiRequest, ApiResponse]]:
        """
        Send every request of a collection, each with its effective auth.

        Args:
            collection: Collection to run
            environment_variables: Active environment variables
            max_workers: Number of concurrent workers

        Returns:
            (request, response) pairs in collection order
        """
        environment_variables = list(environment_variables or [])
        requests_to_send = list(collection.iter_requests())

        def send(request: ApiRequest) -> ApiResponse:
            auth = resolve_effective_auth(request, collection)
            return self.execute(request, collection.variables, environment_variables, auth)

        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
            responses = list(pool.map(send, requests_to_send))

        return list(zip(requests_to_send, responses))


def build_history_entry(
    request: ApiRequest,
    response: Optional[ApiResponse],
    collection_variables: Optional[Iterable[KeyValue]] = None,
    environment_variables: Optional[Iterable[KeyValue]] = None
) -> HistoryEntry:
    """
    Build the history record for a sent request.

    The stored request has variables resolved except secret ones, which stay
    as <<name>> placeholders.
    """
    return HistoryEntry(
        request=resolve_request_variables(request, collection_variables, environment_variables),
        response=response,
        timestamp=int(time.time() * 1000),
    )
