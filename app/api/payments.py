from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.core.audit import audit_operator
from app.core.config import settings
from app.core.dependencies import get_current_user, get_payment_gateway
from app.core.exceptions import BackendUnavailable, GatewayError, NotFoundError, ValidationError
from app.models.user import User
from app.schemas.payment import InvoiceCreate, InvoiceResponse, ManualPaymentCreate, PaymentResponse
from app.services import payment as payment_service
from app.services.gateway import XenditClient
from typing import List, Optional
from uuid import UUID

router = APIRouter(prefix="/api", tags=["payments"])


@router.get("/payments", response_model=List[PaymentResponse])
def list_payments(
    loan_id: Optional[UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List payments, newest first."""
    return payment_service.list_payments(db, loan_id=loan_id)


@router.get("/loans/{loan_id}/payments", response_model=List[PaymentResponse])
def list_loan_payments(
    loan_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Payments recorded against one loan."""
    return payment_service.list_payments(db, loan_id=loan_id)


@router.post("/loans/{loan_id}/payments", response_model=PaymentResponse, status_code=201)
def record_manual_payment(
    loan_id: UUID,
    payment_in: ManualPaymentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record a cash payment; the loan is marked paid once fully covered."""
    try:
        payment = payment_service.record_manual_payment(
            db=db,
            loan_id=loan_id,
            amount=payment_in.amount,
            notes=payment_in.notes,
            idempotency_key=payment_in.idempotency_key,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BackendUnavailable as e:
        detail = {"message": str(e), "recorded": e.payment_id is not None, "payment_id": e.payment_id}
        raise HTTPException(status_code=503, detail=detail)

    audit_operator(current_user, "Record manual payment", f"loan_id={loan_id} amount={payment.amount} payment_id={payment.id}")
    return payment


@router.post("/loans/{loan_id}/invoices", response_model=InvoiceResponse, status_code=201)
def create_invoice(
    loan_id: UUID,
    invoice_in: InvoiceCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: XenditClient = Depends(get_payment_gateway),
):
    """Create a hosted invoice the borrower can pay online."""
    try:
        payment = payment_service.create_hosted_invoice(
            db=db,
            gateway=gateway,
            loan_id=loan_id,
            amount=invoice_in.amount,
            payer_email=invoice_in.payer_email,
            description=invoice_in.description,
            success_redirect_url=settings.INVOICE_SUCCESS_REDIRECT_URL,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GatewayError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except BackendUnavailable as e:
        detail = {"message": str(e), "invoice_created": e.invoice_id is not None, "invoice_id": e.invoice_id}
        raise HTTPException(status_code=503, detail=detail)

    audit_operator(current_user, "Create invoice", f"loan_id={loan_id} amount={payment.amount} reference={payment.external_reference}")
    return InvoiceResponse(
        payment_id=payment.id,
        invoice_url=payment.invoice_url,
        external_id=payment.external_reference,
    )
