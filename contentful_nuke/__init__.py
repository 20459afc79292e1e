from .client import ContentfulClient, Environment
from .errors import (
    ContentfulApiError,
    ContentfulNukeError,
    FatalConfigError,
    FatalConnectivityError,
    RetireError,
    RetirePhase,
)
from .models import (
    BatchConfig,
    Page,
    ResourceKind,
    ResourceRef,
    RunOutcome,
    RunReport,
    ScopeFilter,
)
from .orchestrator import Orchestrator, RunOptions
from .remover import ResourceRemover, retire

__all__ = [
    "BatchConfig",
    "ContentfulApiError",
    "ContentfulClient",
    "ContentfulNukeError",
    "Environment",
    "FatalConfigError",
    "FatalConnectivityError",
    "Orchestrator",
    "Page",
    "ResourceKind",
    "ResourceRef",
    "ResourceRemover",
    "RetireError",
    "RetirePhase",
    "RunOptions",
    "RunOutcome",
    "RunReport",
    "ScopeFilter",
    "retire",
]
