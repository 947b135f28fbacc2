"""
Statement API endpoints.
"""

from fastapi import APIRouter, Depends

from ledger_service.api.deps import get_owner_id, get_statement_service
from ledger_service.schemas.statement import StatementRequest, StatementResponse
from ledger_service.services.statement import StatementService

router = APIRouter(prefix="/statements", tags=["Statements"])


@router.post("/generate", response_model=StatementResponse)
def generate_statement(
    request: StatementRequest,
    owner_id: int = Depends(get_owner_id),
    statements: StatementService = Depends(get_statement_service)
):
    """
    Generate a statement for one of the caller's accounts.

    - **accountId**: Account to report on
    - **startDate** / **endDate**: Period, both ends inclusive
    """
    return statements.generate(request.account_id, owner_id, request.start_date, request.end_date)
