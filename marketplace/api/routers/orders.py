# marketplace/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.errors import NotFoundError
from marketplace.domain.schemas import OrderDetailsOut, OrderOut, OrdersByVendorOut
from marketplace.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.get("/user/{user_id}", response_model=List[OrderOut])
def get_user_orders(user_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_user_orders(user_id)


@router.get("/user/{user_id}/by-vendor", response_model=OrdersByVendorOut)
def get_user_orders_by_vendor(user_id: int, db: Session = Depends(get_db)):
    """
    The user's orders keyed by vendor name.
    """
    return get_service(db).get_user_orders_by_vendor(user_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_order(order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{order_id}/details", response_model=OrderDetailsOut)
def get_order_details(order_id: int, db: Session = Depends(get_db)):
    """
    Order with vendor contact and items.
    """
    svc = get_service(db)
    try:
        return svc.get_order_details(order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
