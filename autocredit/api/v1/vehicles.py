"""/v1/vehicles - vehicle eligibility and authorized brands"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from autocredit.api.dependencies import get_credit_policy, get_request_id
from autocredit.api.v1.schemas import (
    AuthorizedBrandsResponse,
    VehicleEligibilityResponse,
    VehicleSchema,
    eligibility_checks,
)
from autocredit.domain.eligibility import check_vehicle_eligibility
from autocredit.domain.exceptions import InvalidInputError
from autocredit.domain.policy import CreditPolicy

router = APIRouter()


@router.post("/vehicles/eligibility", response_model=VehicleEligibilityResponse)
def check_vehicle(
    request_body: VehicleSchema,
    request: Request,
    policy: CreditPolicy = Depends(get_credit_policy),
):
    """Age, mileage and brand checks for a vehicle, before a full application"""
    try:
        vehicle = request_body.to_domain()
    except InvalidInputError as e:
        logging.warning(f"Invalid vehicle: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    result = check_vehicle_eligibility(vehicle, policy)

    return VehicleEligibilityResponse(
        vin=vehicle.vin,
        brand=vehicle.brand,
        eligible=result.eligible,
        checks=eligibility_checks(result),
    )


@router.get("/vehicles/authorized-brands", response_model=AuthorizedBrandsResponse)
def list_authorized_brands(policy: CreditPolicy = Depends(get_credit_policy)):
    return AuthorizedBrandsResponse(brands=sorted(policy.eligibility.authorized_brands))
