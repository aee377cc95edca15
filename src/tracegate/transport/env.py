# (c) Copyright IBM Corp. 2024

from typing import Any, Dict, Optional

from tracegate.transport.request import Request


class Env(object):
    """
    The envelope handed to the invoker for a single attempt.  It is rebuilt
    from the request on every attempt, so that a downgraded API starts from
    a clean envelope.
    """

    def __init__(self, request: Request, options: Optional[Dict[str, Any]] = None) -> None:
        self.request = request
        self.options = options or {}
        self.verb = "POST"
        self.path: Optional[str] = None
        self.body: Optional[bytes] = None
        self.headers: Dict[str, str] = {}

    @property
    def parcel(self):
        return self.request.parcel
