from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.core.exceptions import BackendUnavailable, NotFoundError, ValidationError
from app.core.security import verify_callback_token
from app.schemas.payment import GatewayCallback
from app.services.payment import apply_gateway_callback
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


@router.post("/xendit")
def xendit_callback(
    callback: GatewayCallback,
    x_callback_token: Optional[str] = Header(None),
    db: Session = Depends(get_db)
):
    """
    Invoice status notification from Xendit.

    Any non-2xx response makes Xendit retry, so unknown references and
    storage failures are reported as errors rather than acknowledged.
    """
    if not verify_callback_token(x_callback_token):
        logger.warning("Rejected Xendit callback with invalid token for %s", callback.external_id)
        raise HTTPException(status_code=401, detail="Invalid callback token")

    logger.info("Xendit callback received: external_id=%s status=%s", callback.external_id, callback.status)

    try:
        payment = apply_gateway_callback(
            db=db,
            external_reference=callback.external_id,
            status=callback.status,
            gateway_transaction_id=callback.id,
            payment_method=callback.payment_method,
            paid_at=callback.paid_at,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BackendUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    return {"success": True, "payment_id": str(payment.id), "status": payment.status.value}
