#marketplace/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.errors import NotFoundError
from marketplace.domain.schemas import (
    CreateCartIn,
    ItemIn,
    QuantityIn,
    CartOut,
)
from marketplace.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session):
    return CartService(db)


@router.post("/", response_model=CartOut, status_code=201)
def create_cart(payload: CreateCartIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.create_cart(payload.user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/user/{user_id}", response_model=CartOut)
def get_cart_by_user(user_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_cart_by_user(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{cart_id}/items", response_model=CartOut)
def add_item(
    cart_id: int,
    payload: ItemIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.add_product(
            user_id=user_id,
            cart_id=cart_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{cart_id}/items/{product_id}", response_model=CartOut)
def set_item_quantity(
    cart_id: int,
    product_id: int,
    payload: QuantityIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.set_quantity(user_id, cart_id, product_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{cart_id}/items/{product_id}", response_model=CartOut)
def remove_item(
    cart_id: int,
    product_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.remove_product(user_id, cart_id, product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
