import uuid
import random
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from billsynth.core.config import GenerationConfig, Settings, settings as app_settings
from billsynth.db.models.generation_run import GenerationRun, RunMode
from billsynth.db.schemas.generation import (
    CashGenerationRequest, ExportFiles, GenerationResponse, InventoryRow,
    SkipLogItem, UpiGenerationRequest, GenerationRequestBase,
)
from billsynth.services.export_service import PaymentMethod, build_bill_rows, build_stock_rows
from billsynth.services.inventory import InventoryLedger
from billsynth.services.progress_service import ProgressService
from billsynth.services.scheduler import DayScheduler, RunOutcome, split_target_rows
from billsynth.services.session import CancelToken, GenerationSession
from billsynth.utils.dates import export_timestamp
from billsynth.utils.tax_utils import money

logger = logging.getLogger(__name__)


class GenerationService:
    def __init__(
            self,
            db: AsyncSession,
            progress: ProgressService,
            active_runs: Dict[str, CancelToken],
            settings: Settings = app_settings,
    ):
        self.db = db
        self.progress = progress
        self.active_runs = active_runs
        self.settings = settings

    # --- 1. Generation entry points ---
    async def generate_upi(self, request: UpiGenerationRequest) -> GenerationResponse:
        """One exact bill per target row."""
        rows = [row.model_dump() for row in request.targets]

        async def runner(scheduler: DayScheduler) -> RunOutcome:
            return await scheduler.run_single_shot(rows)

        return await self._run(RunMode.UPI, request, runner, PaymentMethod.UPI)

    async def generate_cash(self, request: CashGenerationRequest) -> GenerationResponse:
        """Many bills per day until each daily target is met."""
        targets, rejected = split_target_rows(row.model_dump() for row in request.daily_targets)
        if not any(t.target_amount > 0 for t in targets):
            raise ValueError("At least one daily target must be greater than zero.")

        async def runner(scheduler: DayScheduler) -> RunOutcome:
            return await scheduler.run_daily(targets, request.min_bill, request.max_bill, rejected)

        return await self._run(
            RunMode.CASH, request, runner, PaymentMethod.CASH,
            purchaser_names=request.purchaser_names,
            strict_halt_on_critical=request.strict,
            failure_ceiling=request.failure_ceiling,
        )

    # --- 2. Shared run orchestration ---
    async def _run(
            self,
            mode: RunMode,
            request: GenerationRequestBase,
            runner: Callable[[DayScheduler], Awaitable[RunOutcome]],
            method: PaymentMethod,
            purchaser_names: Optional[List[str]] = None,
            **config_overrides,
    ) -> GenerationResponse:
        if not request.inventory:
            raise ValueError("Inventory is empty.")

        run_id = request.run_id or f"RUN-{str(uuid.uuid4()).upper()[0:8]}"
        if run_id in self.active_runs:
            raise ValueError(f"Run '{run_id}' is already in progress.")

        seed = request.seed
        if seed is None:
            seed = self.settings.RANDOM_SEED
        if seed is None:
            seed = random.randrange(2 ** 31)

        config = GenerationConfig.from_settings(
            self.settings, fraction_rule=request.fraction_rule, **config_overrides
        )
        ledger = InventoryLedger.from_rows(row.model_dump() for row in request.inventory)
        opening_value = ledger.total_value()

        async def on_progress(snapshot: dict) -> None:
            await self.progress.publish(run_id, "running", **snapshot)

        token = CancelToken()
        session = GenerationSession(ledger, config, seed=seed, cancel_token=token, on_progress=on_progress)
        scheduler = DayScheduler(session, purchaser_names or ())

        logger.info(f"Starting {mode.value} run {run_id} (seed {seed}, {len(ledger)} items)")
        self.active_runs[run_id] = token
        await self.progress.publish(run_id, "running", percent=0, failures=0, bills=0)
        try:
            outcome = await runner(scheduler)
        finally:
            self.active_runs.pop(run_id, None)

        prefix = request.bill_prefix or self.settings.DEFAULT_BILL_PREFIX
        bill_rows = build_bill_rows(outcome.bills, method, prefix, request.start_index)
        stock_rows = build_stock_rows(ledger)
        total_billed = money(sum(b.total for b in outcome.bills))
        skip_log = [entry.to_dict() for entry in outcome.skip_log]

        logger.info(
            f"Run {run_id} {outcome.status.value}: {len(outcome.bills)} bills, "
            f"{total_billed} billed, {len(skip_log)} skipped entries"
        )
        await self.progress.publish(run_id, outcome.status.value, percent=100, bills=len(outcome.bills))

        await self._save_run(GenerationRun(
            run_id=run_id,
            mode=mode,
            status=outcome.status.value,
            message=outcome.message,
            seed=seed,
            bill_count=len(outcome.bills),
            total_billed=total_billed,
            opening_stock_value=opening_value,
            closing_stock_value=ledger.total_value(),
            bill_rows=bill_rows,
            stock_rows=stock_rows,
            skip_log=skip_log,
        ))

        stamp = export_timestamp()
        if mode == RunMode.UPI:
            files = ExportFiles(bills=f"generated-upi-bills-{stamp}.xlsx", stock=f"updated-upi-stock-{stamp}.xlsx")
        else:
            files = ExportFiles(bills=f"cash-bills-{stamp}.xlsx", stock=f"updated-cash-stock-{stamp}.xlsx")

        return GenerationResponse(
            run_id=run_id,
            mode=mode,
            status=outcome.status.value,
            message=outcome.message,
            bill_count=len(outcome.bills),
            total_billed=total_billed,
            opening_stock_value=opening_value,
            closing_stock_value=ledger.total_value(),
            bill_rows=bill_rows,
            stock_rows=stock_rows,
            skip_log=[SkipLogItem(**entry) for entry in skip_log],
            files=files,
        )

    async def _save_run(self, run: GenerationRun) -> None:
        try:
            self.db.add(run)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Could not persist run {run.run_id}: {e}", exc_info=True)

    # --- 3. Run bookkeeping ---
    def cancel(self, run_id: str) -> bool:
        token = self.active_runs.get(run_id)
        if token is None:
            return False
        token.cancel()
        logger.info(f"Cancellation requested for run {run_id}")
        return True

    async def list_runs(self, limit: int = 50, offset: int = 0) -> List[GenerationRun]:
        stmt = select(GenerationRun).order_by(desc(GenerationRun.created_at)).offset(offset).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_run(self, run_id: str) -> Optional[GenerationRun]:
        stmt = select(GenerationRun).where(GenerationRun.run_id == run_id)
        return (await self.db.execute(stmt)).scalar_one_or_none()

    @staticmethod
    def inventory_value(rows: List[InventoryRow]) -> tuple[int, float]:
        ledger = InventoryLedger.from_rows(row.model_dump() for row in rows)
        return len(ledger), ledger.total_value()
