"""
Saga runner for ledger operations.

Every business event that moves money runs through run_operation():

1. A ``pending`` journal entry is committed on its own.
2. The event body runs inside one database transaction. Each mutation is a
   saga step executed in its own SAVEPOINT, paired with an optional
   compensation.
3. If a step fails, the compensations of the steps already applied run in
   reverse order (each in its own SAVEPOINT), and the compensated state is
   committed together with the journal entry (``compensated``). The step's
   error is then raised to the caller.
4. If a compensation fails the whole transaction is rolled back, the journal
   entry is flagged ``reconcile`` and ReconciliationRequired is raised.

Errors raised by the body before its first step (validation, authorization)
roll back the transaction and mark the entry ``rejected``.
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.core.errors import LedgerError, ReconciliationRequired
from tourneyhub.core.metrics import COMPENSATION_COUNT, OPERATION_COUNT
from tourneyhub.db.session import unit_of_work
from tourneyhub.models.enums import OperationKind, OperationStatus
from tourneyhub.repos.operation_repo import close_operation, open_operation, set_operation_state

# Configure logging
logger = logging.getLogger(__name__)

T = TypeVar("T")
Action = Callable[[], Awaitable[Any]]


class SagaStepFailed(Exception):
    """A saga step raised; carries the step name and the original error"""

    def __init__(self, step: str, cause: BaseException):
        self.step = step
        self.cause = cause
        super().__init__(f"Step '{step}' failed: {cause}")


class CompensationFailed(Exception):
    """A compensation raised while undoing a failed saga"""

    def __init__(self, step: str, cause: BaseException):
        self.step = step
        self.cause = cause
        super().__init__(f"Compensation for step '{step}' failed: {cause}")


class Saga:
    """Ordered list of applied steps and their compensations"""

    def __init__(self, session: AsyncSession, operation_id: str):
        self.session = session
        self.operation_id = operation_id
        self.applied: List[str] = []
        self.compensated: List[str] = []
        self._compensations: List[Tuple[str, Optional[Action]]] = []

    async def step(self, name: str, action: Action, compensate: Optional[Action] = None) -> Any:
        """Run ``action`` in a savepoint and remember how to undo it"""
        try:
            async with self.session.begin_nested():
                result = await action()
        except Exception as exc:
            logger.warning(f"Operation {self.operation_id}: step '{name}' failed: {exc}")
            raise SagaStepFailed(name, exc) from exc

        self.applied.append(name)
        self._compensations.append((name, compensate))
        return result

    async def compensate(self) -> None:
        """Undo applied steps in reverse order"""
        for name, compensate in reversed(self._compensations):
            if compensate is None:
                continue
            try:
                async with self.session.begin_nested():
                    await compensate()
            except Exception as exc:
                raise CompensationFailed(name, exc) from exc
            self.compensated.append(name)
            COMPENSATION_COUNT.labels(step=name).inc()
            logger.error(f"Operation {self.operation_id}: compensated step '{name}'")


async def run_operation(
    session: AsyncSession,
    kind: OperationKind,
    reference: str,
    body: Callable[[Saga], Awaitable[T]],
    meta: Optional[dict] = None
) -> T:
    """
    Run ``body`` as one journaled, compensable ledger operation.

    Args:
        session: Database session (must not hold uncommitted writes)
        kind: Journal operation kind
        reference: Business key of the event, e.g. the tournament id
        body: Coroutine function receiving the Saga; performs validation,
            then calls saga.step() for every mutation
        meta: Extra journal metadata

    Returns:
        Whatever ``body`` returns
    """
    operation_id = await open_operation(session, kind, reference, meta)
    saga = Saga(session, operation_id)
    failure: Optional[SagaStepFailed] = None

    try:
        async with unit_of_work(session):
            try:
                result = await body(saga)
            except SagaStepFailed as exc:
                failure = exc
                await saga.compensate()
                status = OperationStatus.COMPENSATED if saga.applied else OperationStatus.REJECTED
                await set_operation_state(
                    session, operation_id, status,
                    steps=saga.applied, compensated=saga.compensated, error=str(exc.cause)
                )
            else:
                await set_operation_state(session, operation_id, OperationStatus.APPLIED, steps=saga.applied)
    except CompensationFailed as exc:
        logger.critical(
            f"Operation {operation_id} ({kind.value} {reference}) could not be compensated: {exc}. "
            f"Applied steps {saga.applied}; manual reconciliation required"
        )
        OPERATION_COUNT.labels(kind=kind.value, status=OperationStatus.RECONCILE.value).inc()
        await close_operation(
            session, operation_id, OperationStatus.RECONCILE,
            steps=saga.applied, compensated=saga.compensated, error=str(exc)
        )
        raise ReconciliationRequired(operation_id=operation_id) from exc
    except LedgerError as exc:
        logger.info(f"Operation {operation_id} ({kind.value} {reference}) rejected: {exc.message}")
        OPERATION_COUNT.labels(kind=kind.value, status=OperationStatus.REJECTED.value).inc()
        await close_operation(session, operation_id, OperationStatus.REJECTED, error=exc.message)
        raise
    except Exception as exc:
        logger.exception(f"Operation {operation_id} ({kind.value} {reference}) failed")
        OPERATION_COUNT.labels(kind=kind.value, status=OperationStatus.FAILED.value).inc()
        await close_operation(session, operation_id, OperationStatus.FAILED, steps=[], error=str(exc))
        raise

    if failure is not None:
        status = OperationStatus.COMPENSATED if saga.applied else OperationStatus.REJECTED
        OPERATION_COUNT.labels(kind=kind.value, status=status.value).inc()
        if isinstance(failure.cause, LedgerError):
            raise failure.cause
        raise LedgerError(f"Operation failed at step '{failure.step}'") from failure.cause

    OPERATION_COUNT.labels(kind=kind.value, status=OperationStatus.APPLIED.value).inc()
    return result
