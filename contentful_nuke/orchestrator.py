from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from .client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from .errors import FatalConfigError, FatalConnectivityError
from .models import (
    DEFAULT_PAGE_SIZE,
    BatchConfig,
    ResourceKind,
    RunOutcome,
    RunReport,
    ScopeFilter,
)
from .progress import Colors, ProgressTracker
from .remover import ResourceRemover

Confirm = Callable[[str], Awaitable[bool]]


@dataclass
class RunOptions:
    space_id: str
    access_token: str
    environment_id: str = "master"
    batch_size: int = DEFAULT_PAGE_SIZE
    content_type: str = ""
    delete_content_types: bool = False
    delete_assets: bool = False
    yes: bool = False
    verbose: bool = False
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    @property
    def batch_config(self) -> BatchConfig:
        return BatchConfig(page_size=self.batch_size, verbose=self.verbose)

    @property
    def scope(self) -> ScopeFilter:
        return ScopeFilter(self.content_type or None)

    def validate(self) -> None:
        if not self.access_token:
            raise FatalConfigError(
                "Access token is required via --accesstoken or ACCESSTOKEN."
            )
        if not self.space_id:
            raise FatalConfigError("Space id is required via --space-id or SPACE_ID.")
        self.batch_config.validate()


class Orchestrator:
    """Runs the entries pass, then the optional content type and asset passes.

    Declining the entries prompt stops the run before anything is touched.
    Declining a later prompt skips only that pass. Completed passes are
    never rolled back.
    """

    def __init__(
        self,
        client,
        options: RunOptions,
        confirm: Confirm,
        progress_factory: Callable[[str], object] = ProgressTracker,
    ) -> None:
        self.client = client
        self.options = options
        self.confirm = confirm
        self.progress_factory = progress_factory

    async def _environment(self):
        try:
            return await self.client.get_environment(
                self.options.space_id, self.options.environment_id
            )
        except Exception as error:  # noqa: BLE001
            raise FatalConnectivityError(
                f'Could not open environment "{self.options.environment_id}": {error}'
            ) from error

    async def _gate(self, message: str) -> bool:
        if self.options.yes:
            return True
        return await self.confirm(message)

    async def _pass(
        self, environment, kind: ResourceKind, total: Optional[int] = None
    ) -> RunOutcome:
        remover = ResourceRemover(environment, self.options.batch_config)
        return await remover.remove_all(
            kind,
            self.options.scope,
            self.progress_factory(kind.plural),
            total=total,
        )

    async def run(self) -> Optional[RunReport]:
        options = self.options
        options.validate()
        target = f"{options.space_id}:{options.environment_id}"

        try:
            space = await self.client.get_space(options.space_id)
        except Exception as error:  # noqa: BLE001
            raise FatalConnectivityError(
                f'Could not open space "{options.space_id}": {error}'
            ) from error
        environment = await self._environment()

        scope = options.scope
        try:
            total_entries = await environment.count_matching(ResourceKind.ENTRY, scope)
        except Exception as error:  # noqa: BLE001
            raise FatalConnectivityError(f"Could not count entries: {error}") from error

        print(f"Deleting {total_entries} entries")
        print(f'Using space "{options.space_id}" ({space.get("name", "")})')
        print(f'Using environment "{options.environment_id}"')
        print(f'For content-type "{options.content_type}"')
        print(f"Total Entries Found: {total_entries}")

        if not await self._gate(
            f"Do you really want to delete all targeted entries from space {target}?"
        ):
            print("Aborted.")
            return None

        report = RunReport(
            entries=await self._pass(environment, ResourceKind.ENTRY, total_entries)
        )

        if options.delete_content_types:
            if await self._gate(
                f"Do you really want to delete all content types from space {target}?"
            ):
                # Content types live at environment scope, so use a fresh handle.
                report.content_types = await self._pass(
                    await self._environment(), ResourceKind.CONTENT_TYPE
                )
            else:
                print("Skipping content types.")

        if options.delete_assets:
            if await self._gate(
                f"Do you really want to delete all assets/media from space {target}?"
            ):
                report.assets = await self._pass(
                    await self._environment(), ResourceKind.ASSET
                )
            else:
                print("Skipping assets.")

        return report


def format_errors(outcome: RunOutcome, limit: int = 5) -> List[str]:
    lines = [f"{item_id}: {message}" for item_id, message in outcome.errors.items()]
    if len(lines) > limit:
        lines = lines[:limit] + [f"... {len(lines) - limit} more errors not shown"]
    return lines


def print_summary(report: RunReport) -> None:
    print(f"\n{Colors.BOLD}Operation complete.{Colors.RESET}")
    for outcome in report.outcomes():
        color = Colors.RED if outcome.failed else Colors.GREEN
        remaining = "unknown" if outcome.remaining is None else outcome.remaining
        print(
            f"{color}{outcome.kind.plural}: deleted {outcome.succeeded}/"
            f"{outcome.attempted} (failed {outcome.failed}, "
            f"pages {outcome.pages}, remaining {remaining}){Colors.RESET}"
        )
        for line in format_errors(outcome):
            print(f"  - {Colors.YELLOW}{line}{Colors.RESET}")
