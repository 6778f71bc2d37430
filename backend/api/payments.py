from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from auth import require_student
from clock import get_clock
from schemas import QrisPaymentRequest, QrisPaymentResponse
from services.payments_service import PaymentGatewayError, complete_qris_demo, create_qris_payment
from supabase_client import get_supabase

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/qris", response_model=QrisPaymentResponse)
async def start_qris_payment(
    payload: QrisPaymentRequest,
    user: Dict[str, Any] = Depends(require_student),
    client=Depends(get_supabase),
) -> QrisPaymentResponse:
    try:
        gateway = await create_qris_payment(client, user, payload.order_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except PaymentGatewayError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return QrisPaymentResponse(order_id=payload.order_id, gateway=gateway)


@router.post("/qris/{order_id}/complete-demo", response_model=QrisPaymentResponse)
async def complete_qris_payment(
    order_id: str,
    user: Dict[str, Any] = Depends(require_student),
    client=Depends(get_supabase),
    clock=Depends(get_clock),
) -> QrisPaymentResponse:
    try:
        gateway = await complete_qris_demo(client, clock, user, order_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except PaymentGatewayError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return QrisPaymentResponse(order_id=order_id, gateway=gateway)
