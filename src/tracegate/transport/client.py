# (c) Copyright IBM Corp. 2024

"""
Routes requests to the collector through the current API version and
downgrades the API when the collector does not know it.
"""

import traceback
from typing import Callable

from tracegate.log import logger
from tracegate.transport.api import API, APIMap, FallbackCycleError, TransportConfigurationError
from tracegate.transport.env import Env
from tracegate.transport.request import Request
from tracegate.transport.response import InternalErrorResponse, Response
from tracegate.transport.statistics import Statistics

Invoker = Callable[[API, Env], Response]


class UnknownApiVersion(TransportConfigurationError):
    """Raised when configured with an API version missing from the API map"""

    def __init__(self, version: str) -> None:
        self.version = version
        super(UnknownApiVersion, self).__init__(
            f"No matching transport API for version {version}!"
        )


class TransportClient(Statistics):
    """
    Sends requests with a caller supplied invoker and never raises while doing so.

    @param apis: APIMap of the available versions and their fallbacks
    @param api_id: the version to start with
    """

    def __init__(self, apis: APIMap, api_id: str) -> None:
        self.apis = apis
        self.api_id = None

        self.change_api(api_id)
        # Fails early on a misconfigured catalog
        self.apis.fallback_chain(api_id)

    def send_request(self, request: Request, invoker: Invoker) -> Response:
        """
        Sends <request> through <invoker>, downgrading the API for as long as
        the collector rejects the version and a fallback exists.

        @return: the collector response, or an InternalErrorResponse if
                 anything raised
        """
        try:
            attempted = [self.api_id]

            while True:
                env = self.build_env(request)
                response = invoker(self.current_api, env)
                self.update_stats_from_response(response)

                if not self.downgrade(response):
                    return response

                fallback = self.apis.fallback_for(self.api_id)
                if fallback in attempted:
                    raise FallbackCycleError(attempted + [fallback])

                logger.debug(
                    f"TransportClient: API {self.api_id} rejected by the collector, downgrading to {fallback}"
                )
                self.downgrade_api()
                attempted.append(self.api_id)
        except Exception as exc:
            message = (
                f"Internal error during transport request. Cause: {exc!r} "
                f"Location: {_location(exc)}"
            )

            if self.stats.consecutive_errors > 0:
                logger.debug(message)
            else:
                logger.error(message)

            self.update_stats_from_exception(exc)

            return InternalErrorResponse(exc)

    def build_env(self, request: Request) -> Env:
        return Env(request)

    def downgrade(self, response: Response) -> bool:
        """
        Should the API be downgraded after <response>?
        """
        if self.apis.fallback_for(self.api_id) is None:
            return False
        return response.not_found or response.unsupported

    @property
    def current_api(self) -> API:
        return self.apis[self.api_id]

    def change_api(self, api_id: str) -> None:
        if api_id not in self.apis:
            raise UnknownApiVersion(api_id)
        self.api_id = api_id

    def downgrade_api(self) -> None:
        self.change_api(self.apis.fallback_for(self.api_id))


def _location(exc: BaseException) -> str:
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return "unknown"
    last = frames[-1]
    return f"{last.filename}:{last.lineno} in {last.name}"
