from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .errors import FatalConfigError

DEFAULT_PAGE_SIZE = 5


class ResourceKind(str, Enum):
    ENTRY = "entries"
    CONTENT_TYPE = "content_types"
    ASSET = "assets"

    @property
    def label(self) -> str:
        return _LABELS[self][0]

    @property
    def plural(self) -> str:
        return _LABELS[self][1]


_LABELS = {
    ResourceKind.ENTRY: ("entry", "entries"),
    ResourceKind.CONTENT_TYPE: ("content type", "content types"),
    ResourceKind.ASSET: ("asset", "assets"),
}


@dataclass(frozen=True)
class ResourceRef:
    id: str
    kind: ResourceKind


@dataclass(frozen=True)
class ScopeFilter:
    content_type_id: Optional[str] = None

    def for_kind(self, kind: ResourceKind) -> "ScopeFilter":
        # Content-type filtering only ever narrows entries.
        if kind is ResourceKind.ENTRY:
            return self
        return ScopeFilter()

    @property
    def is_empty(self) -> bool:
        return not self.content_type_id


@dataclass(frozen=True)
class BatchConfig:
    page_size: int = DEFAULT_PAGE_SIZE
    verbose: bool = False

    def validate(self) -> None:
        valid = (
            isinstance(self.page_size, int)
            and not isinstance(self.page_size, bool)
            and self.page_size > 0
        )
        if not valid:
            raise FatalConfigError(
                f"Batch size must be a positive integer, got {self.page_size!r}"
            )


@dataclass
class Page:
    total: int
    items: List[ResourceRef] = field(default_factory=list)


@dataclass
class RunOutcome:
    kind: ResourceKind
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    pages: int = 0
    remaining: Optional[int] = None
    errors: Dict[str, str] = field(default_factory=dict)

    def record_success(self, ref: ResourceRef) -> None:
        self.attempted += 1
        self.succeeded += 1

    def record_failure(self, ref: ResourceRef, error: BaseException) -> None:
        self.attempted += 1
        self.failed += 1
        self.errors[ref.id] = str(error)

    @property
    def survivors(self) -> List[str]:
        return list(self.errors)


@dataclass
class RunReport:
    entries: RunOutcome
    content_types: Optional[RunOutcome] = None
    assets: Optional[RunOutcome] = None

    def outcomes(self) -> List[RunOutcome]:
        return [
            outcome
            for outcome in (self.entries, self.content_types, self.assets)
            if outcome is not None
        ]

    @property
    def any_failed(self) -> bool:
        return any(outcome.failed > 0 for outcome in self.outcomes())
