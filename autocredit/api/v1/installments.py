"""POST /v1/installments - installment quote and amortization schedule"""

import logging

from fastapi import APIRouter, HTTPException, Request

from autocredit.api.dependencies import get_request_id
from autocredit.api.v1.schemas import InstallmentQuoteResponse, InstallmentRequest, InstallmentSchema
from autocredit.domain.amortization import calculate_installment_quote, generate_amortization_schedule
from autocredit.domain.exceptions import InvalidInputError

router = APIRouter()


@router.post("/installments", response_model=InstallmentQuoteResponse)
def quote_installment(request_body: InstallmentRequest, request: Request):
    """
    Fixed monthly installment for a loan, with totals.

    Set include_schedule to also get the month-by-month amortization.
    """
    try:
        quote = calculate_installment_quote(request_body.amount, request_body.annual_rate, request_body.term_months)

        schedule = None
        if request_body.include_schedule:
            schedule = [
                InstallmentSchema(
                    number=inst.number,
                    due_date=inst.due_date,
                    payment=inst.payment,
                    interest=inst.interest,
                    principal=inst.principal,
                    remaining_balance=inst.remaining_balance,
                )
                for inst in generate_amortization_schedule(
                    request_body.amount,
                    request_body.annual_rate,
                    request_body.term_months,
                    request_body.start_date,
                )
            ]

    except InvalidInputError as e:
        logging.warning(f"Invalid installment request: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    return InstallmentQuoteResponse(
        loan_amount=quote.loan_amount,
        annual_rate=quote.annual_rate,
        term_months=quote.term_months,
        monthly_installment=quote.monthly_installment,
        total_amount=quote.total_amount,
        total_interest=quote.total_interest,
        schedule=schedule,
    )
