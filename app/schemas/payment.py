from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from app.models.payment import PaymentMethod, PaymentStatus


class ManualPaymentCreate(BaseModel):
    """Cash payment entered by an operator."""
    amount: Decimal = Field(..., gt=0)
    notes: Optional[str] = None
    idempotency_key: Optional[str] = Field(
        None, max_length=100,
        description="Client-generated token; resubmitting with the same token does not record a second payment"
    )


class InvoiceCreate(BaseModel):
    """Request for a hosted payment invoice."""
    amount: Decimal = Field(..., gt=0)
    payer_email: Optional[EmailStr] = None
    description: Optional[str] = Field(None, max_length=255)


class InvoiceResponse(BaseModel):
    payment_id: UUID
    invoice_url: str
    external_id: str


class PaymentResponse(BaseModel):
    id: UUID
    loan_id: UUID
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    external_reference: Optional[str] = None
    gateway_invoice_id: Optional[str] = None
    invoice_url: Optional[str] = None
    gateway_transaction_id: Optional[str] = None
    gateway_payment_method: Optional[str] = None
    notes: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GatewayCallback(BaseModel):
    """Invoice status notification posted by the gateway.

    Extra fields the gateway sends (amount, payer_email, ...) are ignored.
    """
    id: Optional[str] = Field(None, description="Gateway invoice/transaction id")
    external_id: Optional[str] = None
    status: Optional[str] = None
    payment_method: Optional[str] = None
    paid_at: Optional[str] = None
