from fastapi import APIRouter, Depends

from couponme.core.dependencies import require_auth
from couponme.models.user import User
from couponme.schemas.payment import CheckoutSessionResponse
from couponme.services import payments

router = APIRouter(prefix="/membership", tags=["membership"])


@router.post("/checkout", response_model=CheckoutSessionResponse)
def create_checkout(current_user: User = Depends(require_auth)) -> CheckoutSessionResponse:
    # The Stripe SDK blocks; plain def keeps it in the threadpool.
    return CheckoutSessionResponse(**payments.create_membership_checkout(current_user))
