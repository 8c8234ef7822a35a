# marketplace/api/routers/vendors.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.errors import ConflictError, NotFoundError
from marketplace.domain.schemas import (
    StatusIn,
    StatusOut,
    VendorCreate,
    VendorOrderDetailsOut,
    VendorOrdersOut,
    VendorRead,
    VendorStatisticsOut,
)
from marketplace.services.order_service import OrderService
from marketplace.services.vendor_service import VendorService

router = APIRouter(prefix="/vendors", tags=["vendors"])


@router.post("/", response_model=VendorRead, status_code=201)
def create_vendor(payload: VendorCreate, db: Session = Depends(get_db)):
    svc = VendorService(db)
    try:
        return svc.create_vendor(payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/user/{user_id}", response_model=VendorRead)
def get_vendor_by_user(user_id: int, db: Session = Depends(get_db)):
    svc = VendorService(db)
    try:
        return svc.get_vendor_by_user(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{vendor_id}", response_model=VendorRead)
def get_vendor(vendor_id: int, db: Session = Depends(get_db)):
    svc = VendorService(db)
    try:
        return svc.get_vendor(vendor_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{vendor_id}/orders", response_model=VendorOrdersOut)
def get_vendor_orders(vendor_id: int, db: Session = Depends(get_db)):
    """
    Orders received by a vendor, newest first, with the buyer's name.
    """
    return OrderService(db).get_vendor_orders(vendor_id)


# registered before /{order_id} so "statistics" is not parsed as an id
@router.get("/{vendor_id}/orders/statistics", response_model=VendorStatisticsOut)
def get_vendor_statistics(vendor_id: int, db: Session = Depends(get_db)):
    return OrderService(db).get_vendor_statistics(vendor_id)


@router.get("/{vendor_id}/orders/{order_id}", response_model=VendorOrderDetailsOut)
def get_vendor_order_details(vendor_id: int, order_id: int, db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        return svc.get_vendor_order_details(vendor_id, order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{vendor_id}/orders/{order_id}/status", response_model=StatusOut)
def update_order_status(
    vendor_id: int,
    order_id: int,
    payload: StatusIn,
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        return svc.update_order_status(vendor_id, order_id, payload.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
