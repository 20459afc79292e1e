from enum import Enum
from typing import Optional


class ContentfulNukeError(Exception):
    pass


class FatalConfigError(ContentfulNukeError):
    """Raised before any deletion when the run is misconfigured."""


class FatalConnectivityError(ContentfulNukeError):
    """Raised when a lookup a pass depends on (space, environment, count) fails."""


class ContentfulApiError(ContentfulNukeError):
    def __init__(
        self, method: str, url: str, status: Optional[int], body: str
    ) -> None:
        self.method = method
        self.url = url
        self.status = status
        self.body = body
        if status is None:
            message = f"{method} {url} failed: {body}"
        else:
            message = f"{method} {url} failed ({status}): {body}"
        super().__init__(message)


class RetirePhase(str, Enum):
    LOOKUP = "lookup"
    UNPUBLISH = "unpublish"
    DELETE = "delete"


class RetireError(ContentfulNukeError):
    def __init__(self, ref, phase: RetirePhase, cause: BaseException) -> None:
        self.ref = ref
        self.phase = phase
        self.cause = cause
        super().__init__(
            f"{ref.kind.label} {ref.id}: {phase.value} failed: {cause}"
        )
