# marketplace/api/routers/checkout.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from marketplace.api.dependencies import (
    get_lock_service,
    get_notification_service,
    get_order_numbers,
)
from marketplace.data.database import get_db
from marketplace.domain.checkout import CheckoutInput
from marketplace.domain.errors import ConflictError, InternalError, NotFoundError
from marketplace.domain.schemas import CheckoutIn, MultiVendorCheckoutOut, OrderOut
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService
from marketplace.services.order_numbers import OrderNumberGenerator

router = APIRouter(tags=["checkout"])


def get_service(
    db: Session = Depends(get_db),
    order_numbers: OrderNumberGenerator = Depends(get_order_numbers),
    lock_service: LockService = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> CheckoutService:
    return CheckoutService(
        db=db,
        order_numbers=order_numbers,
        lock_service=lock_service,
        notification_service=notification_service,
    )


def _to_input(payload: CheckoutIn) -> CheckoutInput:
    return CheckoutInput(**payload.model_dump())


@router.post(
    "/checkout/{user_id}",
    response_model=OrderOut,
    status_code=201,
    responses={
        400: {"description": "Missing checkout field, empty cart, insufficient stock, or a cart with products from more than one vendor (use /checkout-multi-vendor)"},
        404: {"description": "User has no cart"},
        409: {"description": "A checkout for this user is already in progress"},
    },
)
def checkout(
    user_id: int,
    payload: CheckoutIn,
    svc: CheckoutService = Depends(get_service),
):
    """
    Turns the user's cart into a single order. All items must come from one vendor;
    a cart spanning several vendors is rejected with 400 and left unchanged.
    """
    try:
        return svc.checkout(user_id, _to_input(payload))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InternalError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/checkout-multi-vendor/{user_id}", response_model=MultiVendorCheckoutOut, status_code=201)
def checkout_multi_vendor(
    user_id: int,
    payload: CheckoutIn,
    svc: CheckoutService = Depends(get_service),
):
    """
    Splits the user's cart into one order per vendor, all or nothing.
    """
    try:
        return svc.checkout_multi_vendor(user_id, _to_input(payload))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InternalError as e:
        raise HTTPException(status_code=500, detail=str(e))
