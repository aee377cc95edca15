# (c) Copyright IBM Corp. 2024

from tracegate.transport.response import Response


class Counts(object):
    """Counters kept by a transport client"""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.requests = 0
        self.success = 0
        self.client_error = 0
        self.server_error = 0
        self.internal_error = 0
        self.consecutive_errors = 0

    def __repr__(self) -> str:
        return f"Counts({self.__dict__})"


class Statistics(object):
    """
    Mixin keeping a Counts record up to date from responses and exceptions.
    The record is created once and only ever mutated.
    """

    _stats = None

    @property
    def stats(self) -> Counts:
        if self._stats is None:
            self._stats = Counts()
        return self._stats

    def update_stats_from_response(self, response: Response) -> None:
        self.stats.requests += 1

        if response.ok:
            self.stats.success += 1
            self.stats.consecutive_errors = 0
        else:
            if response.client_error:
                self.stats.client_error += 1
            if response.server_error:
                self.stats.server_error += 1
            if response.internal_error:
                self.stats.internal_error += 1
            self.stats.consecutive_errors += 1

    def update_stats_from_exception(self, exception: BaseException) -> None:
        self.stats.internal_error += 1
        self.stats.consecutive_errors += 1
