import logging
import time
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import BackendUnavailable, NotFoundError, ValidationError
from app.models.loan import Loan
from app.models.payment import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    TERMINAL_PAYMENT_STATUSES,
)
from app.services.gateway import XenditClient
from app.services.settlement import reconcile_loan, sum_paid_payments

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("9999999999999.99")  # Numeric(15, 2)

# Gateway status code -> local payment status
GATEWAY_STATUS_MAP = {
    "PAID": PaymentStatus.PAID,
    "SETTLED": PaymentStatus.PAID,
    "EXPIRED": PaymentStatus.EXPIRED,
    "FAILED": PaymentStatus.FAILED,
}


def _validate_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {amount!r}")
    if not value.is_finite() or value <= 0:
        raise ValidationError("Amount must be greater than zero")
    if value > MAX_AMOUNT:
        raise ValidationError(f"Amount {value} exceeds {MAX_AMOUNT}")
    if value != value.quantize(CENT):
        raise ValidationError(f"Amount {value} has more than two decimal places")
    return value


def _ensure_loan_exists(db: Session, loan_id: UUID) -> Loan:
    try:
        loan = db.query(Loan).filter(Loan.id == loan_id).first()
    except SQLAlchemyError as e:
        db.rollback()
        raise BackendUnavailable(f"Could not read loan {loan_id}: {e}") from e
    if not loan:
        raise NotFoundError(f"Loan {loan_id} not found")
    return loan


def list_payments(db: Session, loan_id: Optional[UUID] = None) -> List[Payment]:
    """Payments, newest first, optionally for one loan."""
    query = db.query(Payment)
    if loan_id:
        query = query.filter(Payment.loan_id == loan_id)
    return query.order_by(Payment.created_at.desc()).all()


def _find_by_idempotency_key(db: Session, idempotency_key: str, loan_id: UUID) -> Optional[Payment]:
    existing = db.query(Payment).filter(Payment.idempotency_key == idempotency_key).first()
    if existing and existing.loan_id != loan_id:
        raise ValidationError("Idempotency key already used for a different loan")
    return existing


def _settle_after_payment(db: Session, payment: Payment) -> Payment:
    try:
        reconcile_loan(db, payment.loan_id)
    except BackendUnavailable as e:
        raise BackendUnavailable(
            f"Payment {payment.id} recorded but settlement check failed: {e}",
            payment_id=str(payment.id),
        ) from e
    return payment


def record_manual_payment(
    db: Session,
    loan_id: UUID,
    amount: Decimal,
    notes: Optional[str] = None,
    idempotency_key: Optional[str] = None,
) -> Payment:
    """
    Record an operator-entered cash payment and settle the loan if covered.

    With an ``idempotency_key`` a retried submission returns the payment
    already stored under that key instead of inserting a second one. The loan
    is reconciled on every call, so retrying after a failed settlement check
    finishes the settlement.

    Raises:
        ValidationError: amount is not positive or finer than a cent, or the
            key belongs to another loan. Nothing is inserted.
        NotFoundError: loan does not exist.
        BackendUnavailable: the insert failed (nothing recorded), or the
            settlement check failed after the insert (``payment_id`` is set).
    """
    amount = _validate_amount(amount)
    _ensure_loan_exists(db, loan_id)

    if idempotency_key:
        existing = _find_by_idempotency_key(db, idempotency_key, loan_id)
        if existing:
            logger.info("Manual payment replay for key %s returns payment %s", idempotency_key, existing.id)
            return _settle_after_payment(db, existing)

    payment = Payment(
        loan_id=loan_id,
        amount=amount,
        method=PaymentMethod.MANUAL,
        status=PaymentStatus.PAID,
        paid_at=datetime.utcnow(),
        notes=notes or None,
        idempotency_key=idempotency_key or None,
    )
    try:
        db.add(payment)
        db.commit()
    except IntegrityError:
        db.rollback()
        # Lost a race with a concurrent submission carrying the same key
        if idempotency_key:
            existing = _find_by_idempotency_key(db, idempotency_key, loan_id)
            if existing:
                return _settle_after_payment(db, existing)
        raise BackendUnavailable("Payment was not recorded: integrity error")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Manual payment insert failed for loan %s: %s", loan_id, e)
        raise BackendUnavailable(f"Payment was not recorded: {e}") from e

    db.refresh(payment)
    logger.info("Manual payment %s of %s recorded for loan %s", payment.id, amount, loan_id)
    return _settle_after_payment(db, payment)


def make_external_reference(loan_id: UUID) -> str:
    """Unique per attempt: loan id, epoch milliseconds and a random tail."""
    return f"LOAN-{loan_id}-{int(time.time() * 1000)}-{uuid4().hex[:6]}"


def create_hosted_invoice(
    db: Session,
    gateway: XenditClient,
    loan_id: UUID,
    amount: Decimal,
    payer_email: Optional[str] = None,
    description: Optional[str] = None,
    success_redirect_url: Optional[str] = None,
) -> Payment:
    """
    Create a gateway invoice and a PENDING payment correlated to it.

    The gateway invoice is the source of truth. If it is created but the
    local insert fails, the invoice is left orphaned, logged, and reported
    through ``BackendUnavailable.invoice_id``.

    Raises:
        ValidationError, NotFoundError, GatewayError, BackendUnavailable
    """
    amount = _validate_amount(amount)
    _ensure_loan_exists(db, loan_id)

    external_reference = make_external_reference(loan_id)
    description = description or f"Pembayaran pinjaman #{str(loan_id)[:8]}"

    # GatewayError propagates; nothing is stored locally
    invoice = gateway.create_invoice(
        external_id=external_reference,
        amount=amount,
        description=description,
        payer_email=payer_email,
        success_redirect_url=success_redirect_url,
    )

    payment = Payment(
        loan_id=loan_id,
        amount=amount,
        method=PaymentMethod.HOSTED_GATEWAY,
        status=PaymentStatus.PENDING,
        external_reference=external_reference,
        gateway_invoice_id=invoice.invoice_id,
        invoice_url=invoice.invoice_url,
        notes=description,
    )
    try:
        db.add(payment)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "Orphaned invoice %s (reference %s, loan %s): local insert failed: %s",
            invoice.invoice_id, external_reference, loan_id, e,
        )
        raise BackendUnavailable(
            f"Invoice {invoice.invoice_id} created but not recorded locally",
            invoice_id=invoice.invoice_id,
        ) from e

    db.refresh(payment)
    logger.info("Invoice %s issued for loan %s as payment %s", invoice.invoice_id, loan_id, payment.id)
    return payment


def _parse_paid_at(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable paid_at %r in callback, using now", value)
            return None
    # Stored naive UTC like every other timestamp
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def apply_gateway_callback(
    db: Session,
    external_reference: Optional[str],
    status: Optional[str],
    gateway_transaction_id: Optional[str] = None,
    payment_method: Optional[str] = None,
    paid_at=None,
) -> Payment:
    """
    Apply a gateway status notification to the matching payment.

    Only PENDING payments move; PAID, EXPIRED and FAILED are terminal, so a
    redelivered notification changes nothing. When the payment is PAID the
    loan is reconciled, which re-sums payments and so never double counts.

    Raises:
        ValidationError: missing external reference.
        NotFoundError: no payment carries the reference. Nothing is mutated.
        BackendUnavailable: storage failed.
    """
    if not external_reference:
        raise ValidationError("Missing external_id")

    try:
        payment = db.query(Payment).filter(Payment.external_reference == external_reference).first()
    except SQLAlchemyError as e:
        db.rollback()
        raise BackendUnavailable(f"Could not read payment {external_reference}: {e}") from e

    if not payment:
        logger.warning("Callback for unknown reference %s (status=%s) rejected", external_reference, status)
        raise NotFoundError(f"No payment with external reference {external_reference}")

    new_status = GATEWAY_STATUS_MAP.get((status or "").upper())

    if payment.status not in TERMINAL_PAYMENT_STATUSES and new_status is not None:
        payment.status = new_status
        payment.gateway_transaction_id = gateway_transaction_id or payment.gateway_transaction_id
        payment.gateway_payment_method = payment_method or payment.gateway_payment_method
        if new_status == PaymentStatus.PAID:
            payment.paid_at = _parse_paid_at(paid_at) or datetime.utcnow()
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Callback update failed for %s: %s", external_reference, e)
            raise BackendUnavailable(f"Could not update payment {external_reference}: {e}") from e
        db.refresh(payment)
        logger.info("Payment %s moved to %s by gateway callback", payment.id, new_status.value)
    elif new_status is None:
        logger.info("Callback status %r for %s leaves payment %s", status, external_reference, payment.status.value)
    elif new_status != payment.status:
        logger.warning(
            "Ignoring callback %s -> %s for %s: payment already terminal",
            payment.status.value, new_status.value, external_reference,
        )

    if payment.status == PaymentStatus.PAID:
        reconcile_loan(db, payment.loan_id)

    return payment


def get_total_paid(db: Session, loan_id: UUID) -> Decimal:
    """Confirmed total paid toward a loan."""
    return sum_paid_payments(db, loan_id)
