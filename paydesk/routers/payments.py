from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from paydesk.database import get_db
from paydesk.errors import ValidationError
from paydesk.utils.flash import flash
from paydesk.utils.payments import FLASH_MESSAGES, apply_payment

import logging
logger = logging.getLogger("paydesk.payments")

router = APIRouter(tags=["Payments"])


# Paystack redirects the payer's browser here with ?reference=
@router.get("/verify-payment")
def verify_payment(
    request: Request,
    reference: str = Query(..., min_length=1, max_length=100),
    db: Session = Depends(get_db),
):
    reference = reference.strip()
    if not reference:
        raise ValidationError("Payment reference is required")

    outcome = apply_payment(db, request.app.state.paystack, reference)
    logger.info("Payment %s verified: %s", reference, outcome.value)

    category, message = FLASH_MESSAGES[outcome]
    flash(request, category, message)
    return RedirectResponse("/dashboard", status_code=302)
