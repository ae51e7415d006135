from fastapi import Request


class FileserverMetrics:
    """Process-wide count of requests served under the static file mount."""

    def __init__(self) -> None:
        self._hits = 0

    @property
    def hits(self) -> int:
        return self._hits

    def increment(self) -> None:
        self._hits += 1

    def reset(self) -> None:
        self._hits = 0


def get_metrics(request: Request) -> FileserverMetrics:
    return request.app.state.metrics
