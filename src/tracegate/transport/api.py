# (c) Copyright IBM Corp. 2024

"""
The catalog of collector APIs the transport can talk to.
"""

from typing import Any, Callable, Dict, List, Optional

from tracegate.constants import V0_3, V0_4
from tracegate.util import to_json


class TransportConfigurationError(Exception):
    """
    Base class for transport misconfiguration.  Raised when a client is built
    or its API is changed directly; inside send_request they are contained
    like any other error and returned as an InternalErrorResponse.
    """


class FallbackCycleError(TransportConfigurationError):
    """Raised when following the API fallbacks leads back to an already visited version"""

    def __init__(self, chain: List[str]) -> None:
        self.chain = chain
        super(FallbackCycleError, self).__init__(
            f"Transport API fallbacks form a cycle: {' -> '.join(chain)}"
        )


class API(object):
    """
    Describes one version of the collector API.

    @param version: identifier of this API version, e.g. "v0.4"
    @param endpoint: path the payload is sent to
    @param encoder: callable turning the request parcel data into bytes
    @param service_rates: True if the collector answers with the rate by service table
    """

    def __init__(
        self,
        version: str,
        endpoint: str,
        encoder: Callable[[Any], bytes] = to_json,
        content_type: str = "application/json",
        service_rates: bool = False,
    ) -> None:
        self.version = version
        self.endpoint = endpoint
        self.encoder = encoder
        self.content_type = content_type
        self.service_rates = service_rates

    def encode(self, data: Any) -> bytes:
        body = self.encoder(data)
        if body is None:
            raise ValueError(f"Encoder for API {self.version} produced no payload")
        return body

    def __repr__(self) -> str:
        return f"API(version={self.version!r}, endpoint={self.endpoint!r})"


class APIMap(dict):
    """
    API versions by identifier, plus the version each one downgrades to.
    A version missing from <fallbacks> cannot be downgraded.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super(APIMap, self).__init__(*args, **kwargs)
        self.fallbacks: Dict[str, str] = {}

    def with_fallbacks(self, fallbacks: Dict[str, str]) -> "APIMap":
        self.fallbacks.update(fallbacks)
        return self

    def fallback_for(self, version: str) -> Optional[str]:
        return self.fallbacks.get(version)

    def fallback_chain(self, version: str) -> List[str]:
        """
        Returns <version> followed by every version it can downgrade to.
        Raises FallbackCycleError if a version shows up twice.
        """
        chain = [version]
        current = self.fallbacks.get(version)
        while current is not None:
            if current in chain:
                raise FallbackCycleError(chain + [current])
            chain.append(current)
            current = self.fallbacks.get(current)
        return chain


def default_apis() -> APIMap:
    """
    v0.4 answers with the sampling rates by service; older agents only know v0.3.
    """
    return APIMap(
        {
            V0_4: API(V0_4, "/v0.4/traces", service_rates=True),
            V0_3: API(V0_3, "/v0.3/traces"),
        }
    ).with_fallbacks({V0_4: V0_3})
