"""
multi_payments.py — Region-aware payment method catalogue

Called by: main.py (router mount)
Depends on: services/multi_payment_service
"""

from fastapi import APIRouter, Depends, Query

from ..dependencies import require_user
from ..models import User
from ..schemas.orders import FeeRequest, PaymentInit
from ..services import multi_payment_service as mp

router = APIRouter(tags=["payments"])


@router.get("/api/multi-payments/methods")
def region_methods(
    country: str = Query("US", min_length=2, max_length=2),
    amount: int = Query(0, ge=0),
):
    info = mp.get_region_and_currency(country)
    return {
        **info,
        "primary_method": mp.get_primary_payment_method(info["region"]),
        "recommended": mp.get_recommended_payment_methods(info["region"], amount),
    }


@router.get("/api/multi-payments/methods/{method}")
def method_details(method: str):
    return mp.get_payment_method_details(method)


@router.post("/api/multi-payments/fees")
def total_with_fees(body: FeeRequest):
    return mp.calculate_total_with_fees(body.amount, body.method)


@router.post("/api/multi-payments/initialize")
def initialize_payment(body: PaymentInit, user: User = Depends(require_user)):
    mp.validate_payment_amount(body.amount, body.method)
    return mp.generate_payment_payload(
        body.order_id, body.amount, body.currency, body.method, body.customer_email
    )
