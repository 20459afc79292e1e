import asyncio
from typing import Callable, Optional, Set, Tuple

from .errors import FatalConnectivityError, RetireError, RetirePhase
from .models import (
    BatchConfig,
    ResourceKind,
    ResourceRef,
    RunOutcome,
    ScopeFilter,
)

# Largest page the Contentful Management API returns.
MAX_FETCH_LIMIT = 1000


async def retire(
    backend,
    ref: ResourceRef,
    verbose: bool = False,
    narrate: Optional[Callable[[str], None]] = None,
) -> None:
    """Unpublish ``ref`` if it is currently published, then delete it.

    The published state is read right before acting on it. A failed
    unpublish stops the sequence since the backend rejects deleting a
    published resource.
    """
    label = ref.kind.label

    try:
        published = await backend.is_published(ref)
    except Exception as error:  # noqa: BLE001
        raise RetireError(ref, RetirePhase.LOOKUP, error) from error

    if published:
        if verbose and narrate:
            narrate(f'Unpublishing {label} "{ref.id}"')
        try:
            await backend.unpublish(ref)
        except Exception as error:  # noqa: BLE001
            raise RetireError(ref, RetirePhase.UNPUBLISH, error) from error

    if verbose and narrate:
        narrate(f'Deleting {label} "{ref.id}"')
    try:
        await backend.delete(ref)
    except Exception as error:  # noqa: BLE001
        raise RetireError(ref, RetirePhase.DELETE, error) from error


class ResourceRemover:
    """Deletes every resource of a kind in pages of ``config.page_size``.

    There is no cursor: each iteration asks for the first page of what
    still matches, which only works because deleting shrinks the set.
    ``backend`` must provide ``count_matching``, ``fetch_page``,
    ``is_published``, ``unpublish`` and ``delete``.
    """

    def __init__(self, backend, config: BatchConfig) -> None:
        self.backend = backend
        self.config = config

    async def remove_all(
        self,
        kind: ResourceKind,
        scope: ScopeFilter,
        progress,
        total: Optional[int] = None,
    ) -> RunOutcome:
        self.config.validate()
        scope = scope.for_kind(kind)
        page_size = self.config.page_size

        if total is None:
            try:
                total = await self.backend.count_matching(kind, scope)
            except Exception as error:  # noqa: BLE001
                raise FatalConnectivityError(
                    f"Could not count {kind.plural}: {error}"
                ) from error
            print(f"Deleting {total} {kind.plural}")

        outcome = RunOutcome(kind)
        attempted_ids: Set[str] = set()
        progress.start(total)
        try:
            if total > 0:
                await self._drain(kind, scope, page_size, progress, outcome, attempted_ids)
        finally:
            progress.close()

        try:
            outcome.remaining = await self.backend.count_matching(kind, scope)
        except Exception as error:  # noqa: BLE001
            print(f"Could not re-count {kind.plural} after the pass: {error}")

        if outcome.failed:
            print(
                f"{outcome.failed} {kind.plural} could not be deleted; "
                "re-run to retry the survivors."
            )
        return outcome

    async def _drain(
        self,
        kind: ResourceKind,
        scope: ScopeFilter,
        page_size: int,
        progress,
        outcome: RunOutcome,
        attempted_ids: Set[str],
    ) -> None:
        while True:
            # Failed items stay in the matching set; widen the window past them.
            survivors = len(outcome.errors)
            limit, skip = page_size + survivors, 0
            if limit > MAX_FETCH_LIMIT:
                limit, skip = page_size, survivors
            try:
                page = await self.backend.fetch_page(kind, scope, limit, skip=skip)
            except Exception as error:  # noqa: BLE001
                progress.write(f"Fetching {kind.plural} failed, ending pass: {error}")
                return
            outcome.pages += 1

            fresh = [ref for ref in page.items if ref.id not in attempted_ids]
            if not fresh:
                unseen = page.total - survivors
                if unseen > 0:
                    progress.write(
                        f"{unseen} {kind.plural} still match but none could be "
                        "fetched past the failed ones, ending pass"
                    )
                return
            fresh = fresh[:page_size]
            attempted_ids.update(ref.id for ref in fresh)

            results = await asyncio.gather(
                *(self._retire_one(ref, progress) for ref in fresh)
            )
            for ref, error in results:
                if error is None:
                    outcome.record_success(ref)
                else:
                    outcome.record_failure(ref, error)

            if page.total - survivors <= page_size:
                return

    async def _retire_one(
        self, ref: ResourceRef, progress
    ) -> Tuple[ResourceRef, Optional[BaseException]]:
        try:
            await retire(self.backend, ref, self.config.verbose, progress.write)
            return ref, None
        except Exception as error:  # noqa: BLE001
            progress.write(f"Error: {error}")
            return ref, error
        finally:
            progress.tick()

