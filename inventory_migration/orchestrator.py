"""Migration orchestrator - coordinates export, import and clean runs."""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .models.collection import RunContext
from .models.migration import (
    MigrationConfig,
    MigrationRun,
    MigrationStatus,
    MigrationStep,
    RunAction,
    SystemConfig,
)
from .extractors.seed_loader import DestinationSeedLoader
from .extractors.source_extractor import SourceExtractor
from .loaders.base import LoadResult
from .loaders.cleaner import Cleaner
from .loaders.importer import Importer
from .services.api_client import ApiClient
from .services.auth import fetch_token
from .services.preflight import PreflightChecker
from .services.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class MigrationOrchestrator:
    """
    Runs one action at a time against the configured systems.

    Handles:
    - Token acquisition, once per system per orchestrator
    - export-source: seed preload, extraction, snapshot store
    - import: snapshot load, preflight check, ordered create
    - clean: snapshot load, reverse-order delete
    - Progress tracking in a MigrationRun per action
    """

    def __init__(
        self,
        config: MigrationConfig,
        data_dir: str,
        skip_destination_check: bool = False,
        dry_run: bool = False,
        source_client: Optional[ApiClient] = None,
        destination_client: Optional[ApiClient] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Migration configuration
            data_dir: Snapshot directory
            skip_destination_check: Skip seed preload on export and preflight on import
            dry_run: Log destination mutations instead of sending them
            source_client: Prebuilt source client
            destination_client: Prebuilt destination client
        """
        self.config = config
        self.store = SnapshotStore(data_dir)
        self.skip_destination_check = skip_destination_check
        self.dry_run = dry_run
        self._source_client = source_client
        self._destination_client = destination_client
        self.runs: List[MigrationRun] = []

    @property
    def source_client(self) -> ApiClient:
        if self._source_client is None:
            self._source_client = self._create_client(self.config.source)
        return self._source_client

    @property
    def destination_client(self) -> ApiClient:
        if self._destination_client is None:
            self._destination_client = self._create_client(self.config.destination)
        return self._destination_client

    def _create_client(self, system: SystemConfig) -> ApiClient:
        """Authenticate against a system and build its client."""
        token = fetch_token(system, verify_ssl=self.config.verify_ssl)
        return ApiClient(
            base_url=system.url,
            token=token,
            verify_ssl=self.config.verify_ssl,
            retry_config=self.config.retry_config,
        )

    def run(self, action: RunAction) -> MigrationRun:
        """Run a single action."""
        handlers: Dict[RunAction, Callable[[MigrationRun], None]] = {
            RunAction.EXPORT_SOURCE: self._export_source,
            RunAction.IMPORT: self._import_snapshot,
            RunAction.CLEAN: self._clean,
        }
        run = MigrationRun(action=action, data_dir=str(self.store.data_dir), dry_run=self.dry_run)
        self.runs.append(run)
        run.started_at = datetime.utcnow()

        try:
            handlers[action](run)
            run.status = MigrationStatus.COMPLETED
        except Exception as e:
            run.status = MigrationStatus.FAILED
            run.errors.append({
                "error": str(e),
                "timestamp": datetime.utcnow().isoformat(),
            })
            logger.error(f"{action.value} failed: {e}")
            raise
        finally:
            run.completed_at = datetime.utcnow()
            run.update_totals()

        return run

    def export_source(self) -> MigrationRun:
        return self.run(RunAction.EXPORT_SOURCE)

    def import_snapshot(self) -> MigrationRun:
        return self.run(RunAction.IMPORT)

    def clean(self) -> MigrationRun:
        return self.run(RunAction.CLEAN)

    def _start_step(self, run: MigrationRun, name: str, status: MigrationStatus) -> MigrationStep:
        run.status = status
        step = run.add_step(name=name)
        step.status = status
        step.started_at = datetime.utcnow()
        logger.info(f"=== {name.upper()} ===")
        return step

    def _finish_step(self, step: MigrationStep) -> None:
        step.status = MigrationStatus.COMPLETED
        step.completed_at = datetime.utcnow()

    def _record_results(self, step: MigrationStep, results: Dict[str, LoadResult]) -> None:
        for result in results.values():
            step.records_processed += result.total_attempted
            step.records_succeeded += result.total_succeeded
            step.records_failed += result.total_failed
            step.errors.extend(result.errors)

    def _export_source(self, run: MigrationRun) -> None:
        context = RunContext()

        if self.skip_destination_check:
            logger.info("Skipping destination seed preload, seed data will be exported as new")
        else:
            step = self._start_step(run, "Load destination seeds", MigrationStatus.EXTRACTING)
            DestinationSeedLoader(self.destination_client).load(context)
            self._finish_step(step)

        step = self._start_step(run, "Extract source inventory", MigrationStatus.EXTRACTING)
        SourceExtractor(self.source_client, context, page_size=self.config.page_size).extract_all()
        step.warnings.extend(context.warnings)
        self._finish_step(step)

        step = self._start_step(run, "Store snapshot", MigrationStatus.STORING)
        counts = self.store.store_all(context)
        for entity_type, count in counts.items():
            print(f"Exported {count} {entity_type}")
        step.records_processed = step.records_succeeded = sum(counts.values())
        self._finish_step(step)

    def _import_snapshot(self, run: MigrationRun) -> None:
        if self.skip_destination_check:
            logger.info("Skipping destination pre-import check")
        else:
            step = self._start_step(run, "Check destination", MigrationStatus.CHECKING)
            PreflightChecker(self.destination_client, self.store).check()
            self._finish_step(step)

        step = self._start_step(run, "Import snapshot", MigrationStatus.LOADING)
        results = Importer(self.destination_client, self.store, dry_run=self.dry_run).run()
        self._record_results(step, results)
        self._finish_step(step)

    def _clean(self, run: MigrationRun) -> None:
        step = self._start_step(run, "Clean destination", MigrationStatus.CLEANING)
        results = Cleaner(self.destination_client, self.store, dry_run=self.dry_run).run()
        self._record_results(step, results)
        self._finish_step(step)
