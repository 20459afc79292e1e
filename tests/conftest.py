import asyncio
from typing import Dict, List, Optional, Set

import pytest

from contentful_nuke.models import Page, ResourceKind, ResourceRef, ScopeFilter


class FakeBackend:
    """In-memory environment: ordered items per kind, first-page semantics."""

    def __init__(self) -> None:
        self.items: Dict[ResourceKind, List[dict]] = {kind: [] for kind in ResourceKind}
        self.published: Set[str] = set()
        self.fail_delete: Set[str] = set()
        self.fail_unpublish: Set[str] = set()
        self.fail_count = False
        self.calls: List[tuple] = []
        self.fetches: List[int] = []

    def add(self, kind, count, prefix=None, content_type=None, published=False):
        prefix = prefix or kind.value
        start = len(self.items[kind])
        ids = []
        for index in range(start + 1, start + count + 1):
            item_id = f"{prefix}-{index}"
            self.items[kind].append({"id": item_id, "content_type": content_type})
            if published:
                self.published.add(item_id)
            ids.append(item_id)
        return ids

    def _matching(self, kind, scope: ScopeFilter):
        return [
            item
            for item in self.items[kind]
            if scope.is_empty or item["content_type"] == scope.content_type_id
        ]

    @property
    def mutations(self):
        return [call for call in self.calls if call[0] in ("unpublish", "delete")]

    async def count_matching(self, kind, scope):
        self.calls.append(("count", kind, scope))
        if self.fail_count:
            raise RuntimeError("count unavailable")
        return len(self._matching(kind, scope))

    async def fetch_page(self, kind, scope, limit, skip=0):
        self.calls.append(("fetch", kind, scope, limit, skip))
        matching = self._matching(kind, scope)
        items = [ResourceRef(item["id"], kind) for item in matching[skip : skip + limit]]
        self.fetches.append(len(items))
        return Page(total=len(matching), items=items)

    async def is_published(self, ref):
        self.calls.append(("is_published", ref.id))
        await asyncio.sleep(0)
        return ref.id in self.published

    async def unpublish(self, ref):
        self.calls.append(("unpublish", ref.id))
        await asyncio.sleep(0)
        if ref.id in self.fail_unpublish:
            raise RuntimeError("unpublish rejected")
        self.published.discard(ref.id)

    async def delete(self, ref):
        self.calls.append(("delete", ref.id))
        await asyncio.sleep(0)
        if ref.id in self.fail_delete:
            raise RuntimeError("delete rejected")
        if ref.id in self.published:
            raise RuntimeError("cannot delete a published resource")
        self.items[ref.kind] = [
            item for item in self.items[ref.kind] if item["id"] != ref.id
        ]


class FakeClient:
    def __init__(self, backend: FakeBackend) -> None:
        self.backend = backend
        self.environment_lookups = 0

    async def get_space(self, space_id):
        return {"name": "Test Space", "sys": {"id": space_id}}

    async def get_environment(self, space_id, environment_id):
        self.environment_lookups += 1
        return self.backend


class RecordingProgress:
    def __init__(self, label: str = "items") -> None:
        self.label = label
        self.total: Optional[int] = None
        self.ticks = 0
        self.messages: List[str] = []
        self.closed = False

    def start(self, total):
        self.total = total

    def tick(self):
        self.ticks += 1

    def write(self, message):
        self.messages.append(message)

    def close(self):
        self.closed = True


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def progress():
    return RecordingProgress()


@pytest.fixture
def fake_client(backend):
    return FakeClient(backend)


@pytest.fixture
def progress_log():
    """Progress factory that keeps every tracker it hands out."""
    trackers: List[RecordingProgress] = []

    def factory(label):
        tracker = RecordingProgress(label)
        trackers.append(tracker)
        return tracker

    factory.trackers = trackers
    return factory
