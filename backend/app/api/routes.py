from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status

from app.schemas.models import (
    LedgerView,
    RemoteConfig,
    RemoteConfigStatus,
    Transaction,
    TransactionCreate,
)
from app.services.ledger_service import LedgerService

router = APIRouter()


def get_ledger(request: Request) -> LedgerService:
    """Return the ledger service built for this application at startup."""
    return request.app.state.ledger


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/transactions", response_model=LedgerView)
def get_transactions(ledger: LedgerService = Depends(get_ledger)) -> LedgerView:
    """Totals and the newest-first display list."""
    return ledger.view()


@router.post("/transactions", response_model=Transaction, status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreate,
    background_tasks: BackgroundTasks,
    ledger: LedgerService = Depends(get_ledger),
) -> Transaction:
    """Record a transaction locally; the remote copy is written after the response."""
    return ledger.add(payload, dispatch=background_tasks.add_task)


@router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: str,
    background_tasks: BackgroundTasks,
    ledger: LedgerService = Depends(get_ledger),
) -> Response:
    """Delete a transaction. Unknown ids succeed as a no-op."""
    ledger.remove(transaction_id, dispatch=background_tasks.add_task)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/config", response_model=RemoteConfigStatus)
def get_config(ledger: LedgerService = Depends(get_ledger)) -> RemoteConfigStatus:
    return ledger.remote_status()


@router.put("/config", response_model=RemoteConfigStatus)
def save_config(
    payload: RemoteConfig,
    ledger: LedgerService = Depends(get_ledger),
) -> RemoteConfigStatus:
    """Save remote credentials, connect and reload the ledger from the remote store."""
    return ledger.configure_remote(payload)
