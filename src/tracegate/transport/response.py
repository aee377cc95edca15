# (c) Copyright IBM Corp. 2024

"""
Responses returned by the transport client.  Every attempt ends with a
Response: either the collector's answer or an InternalErrorResponse
standing in for an exception raised along the way.
"""

import json
from typing import Any, Dict, Optional

from requests import Response as RequestsResponse

from tracegate.log import logger


class Response(object):
    """Base response: every classification predicate is False"""

    @property
    def payload(self) -> Any:
        return None

    @property
    def ok(self) -> bool:
        return False

    @property
    def unsupported(self) -> bool:
        return False

    @property
    def not_found(self) -> bool:
        return False

    @property
    def client_error(self) -> bool:
        return False

    @property
    def server_error(self) -> bool:
        return False

    @property
    def internal_error(self) -> bool:
        return False

    @property
    def service_rates(self) -> Optional[Dict[str, float]]:
        return None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(ok={self.ok}, unsupported={self.unsupported}, "
            f"not_found={self.not_found}, client_error={self.client_error}, "
            f"server_error={self.server_error}, internal_error={self.internal_error})"
        )


class HTTPResponse(Response):
    """Wraps the requests.Response of a collector call"""

    def __init__(self, http_response: RequestsResponse) -> None:
        self.http_response = http_response

    @property
    def code(self) -> int:
        return self.http_response.status_code

    @property
    def payload(self) -> bytes:
        return self.http_response.content

    @property
    def ok(self) -> bool:
        return 200 <= self.code < 300

    @property
    def unsupported(self) -> bool:
        return self.code == 415

    @property
    def not_found(self) -> bool:
        return self.code == 404

    @property
    def client_error(self) -> bool:
        return 400 <= self.code < 500

    @property
    def server_error(self) -> bool:
        return 500 <= self.code < 600

    @property
    def service_rates(self) -> Optional[Dict[str, float]]:
        """
        The rate by service table some API versions answer with, if any.
        """
        if not self.ok or not self.payload:
            return None

        content = self.payload
        try:
            if isinstance(content, bytes):
                content = content.decode("UTF-8")
            body = json.loads(content)
        except (UnicodeDecodeError, ValueError):
            logger.debug(f"HTTPResponse: response is not JSON: ({content!r})")
            return None

        if not hasattr(body, "get"):
            return None

        rates = body.get("rate_by_service")
        if not isinstance(rates, dict):
            return None
        return rates


class InternalErrorResponse(Response):
    """Returned instead of raising when an attempt failed with an exception"""

    def __init__(self, error: BaseException) -> None:
        self.error = error

    @property
    def internal_error(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"InternalErrorResponse(error={self.error!r})"
