# marketplace/api/routers/products.py
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.errors import ConflictError, InvalidInputError, NotFoundError
from marketplace.domain.schemas import CategoryCreate, CategoryRead, ProductCreate, ProductRead
from marketplace.services.product_service import ProductService

router = APIRouter(tags=["products"])


def get_service(db: Session):
    return ProductService(db)


@router.post("/categories/", response_model=CategoryRead, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.create_category(payload)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/categories/", response_model=List[CategoryRead])
def list_categories(db: Session = Depends(get_db)):
    return get_service(db).list_categories()


@router.post("/products/", response_model=ProductRead, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.create_product(payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/products/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/products/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int,
    changes: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
):
    """
    Partial update. Accepted keys: name, description, price, quantity, category_id.
    """
    svc = get_service(db)
    try:
        return svc.update_product(product_id, changes)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
