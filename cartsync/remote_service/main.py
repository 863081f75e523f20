# cartsync/remote_service/main.py
"""
Remote cart service (dev mock).
In-memory version of the storefront cart API, used for local development and component tests.
Carts are keyed by the bearer token.
"""
import uuid
from decimal import Decimal
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request

from cartsync.domain.schemas import AddCartItemIn, UpdateCartItemIn
from cartsync.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCTS: Dict[str, Dict[str, Any]] = {
    "p-keyboard": {
        "id": "p-keyboard",
        "title": "Keyboard",
        "price": Decimal("199.99"),
        "discounted": None,
        "gallery": ["https://cdn.example.com/keyboard-1.jpg", "https://cdn.example.com/keyboard-2.jpg"],
        "stock": 10,
        "variants": {},
    },
    "p-mouse": {
        "id": "p-mouse",
        "title": "Mouse",
        "price": Decimal("49.50"),
        "discounted": None,
        "gallery": [],
        "stock": 3,
        "variants": {},
    },
    "p-tshirt": {
        "id": "p-tshirt",
        "title": "T-Shirt",
        "price": Decimal("25.00"),
        "discounted": Decimal("19.99"),
        "gallery": ["https://cdn.example.com/tshirt.jpg"],
        "stock": 50,
        "variants": {
            "red": {"id": "red", "name": "Red", "stock": 5, "priceDiff": Decimal("0")},
            "xl": {"id": "xl", "name": "XL", "stock": 2, "priceDiff": Decimal("2.50")},
        },
    },
}


class InMemoryCartRepo:
    """Cart lines per owner, in insertion order."""

    def __init__(self):
        self.carts: Dict[str, List[Dict[str, Any]]] = {}

    def get_lines(self, owner: str) -> List[Dict[str, Any]]:
        return self.carts.get(owner, [])

    def find_line(self, owner: str, line_id: str) -> Dict[str, Any] | None:
        return next((i for i in self.get_lines(owner) if i["id"] == line_id), None)

    def find_by_product(self, owner: str, product_id: str, variant_id: str | None) -> Dict[str, Any] | None:
        return next(
            (
                i for i in self.get_lines(owner)
                if i["productId"] == product_id and i["variantId"] == variant_id
            ),
            None,
        )

    def add_line(self, owner: str, product_id: str, variant_id: str | None, quantity: int) -> Dict[str, Any]:
        line = {
            "id": uuid.uuid4().hex,
            "productId": product_id,
            "variantId": variant_id,
            "quantity": quantity,
        }
        self.carts.setdefault(owner, []).append(line)
        return line

    def delete_line(self, owner: str, line_id: str) -> None:
        self.carts[owner] = [i for i in self.get_lines(owner) if i["id"] != line_id]

    def clear(self, owner: str) -> None:
        self.carts.pop(owner, None)


def _unit_price(product: Dict[str, Any], variant: Dict[str, Any] | None) -> Decimal:
    price = product["discounted"] if product["discounted"] is not None else product["price"]
    if variant:
        price += variant["priceDiff"]
    return price


def _available_stock(product: Dict[str, Any], variant: Dict[str, Any] | None) -> int:
    return variant["stock"] if variant else product["stock"]


def _variant(product: Dict[str, Any], variant_id: str | None) -> Dict[str, Any] | None:
    if variant_id is None:
        return None
    return product["variants"].get(variant_id)


def cart_payload(repo: InMemoryCartRepo, owner: str) -> Dict[str, Any]:
    items = []
    total = Decimal("0")

    for line in repo.get_lines(owner):
        product = PRODUCTS[line["productId"]]
        variant = _variant(product, line["variantId"])
        total += _unit_price(product, variant) * line["quantity"]

        items.append({
            **line,
            "product": {k: v for k, v in product.items() if k != "variants"},
            "variant": variant,
        })

    return {"userId": owner, "items": items, "total": total}


def get_repo(request: Request) -> InMemoryCartRepo:
    return request.app.state.cart_repo


def get_owner(authorization: str | None = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    token = authorization.removeprefix("Bearer ").strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return token


router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("")
def get_cart(owner: str = Depends(get_owner), repo: InMemoryCartRepo = Depends(get_repo)):
    return cart_payload(repo, owner)


@router.post("/items")
def add_item(
    payload: AddCartItemIn,
    owner: str = Depends(get_owner),
    repo: InMemoryCartRepo = Depends(get_repo),
):
    product = PRODUCTS.get(payload.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    variant = None
    if payload.variant_id is not None:
        variant = _variant(product, payload.variant_id)
        if not variant:
            raise HTTPException(status_code=400, detail="Invalid variant selected")

    stock = _available_stock(product, variant)
    existing = repo.find_by_product(owner, payload.product_id, payload.variant_id)
    wanted = payload.quantity + (existing["quantity"] if existing else 0)

    if wanted > stock:
        raise HTTPException(status_code=400, detail=f"Cannot add more than {stock} items of this product")

    if existing:
        logger.info(f"Cart {owner}: product {payload.product_id} quantity {existing['quantity']} -> {wanted}")
        existing["quantity"] = wanted
    else:
        logger.info(f"Cart {owner}: adding product {payload.product_id}")
        repo.add_line(owner, payload.product_id, payload.variant_id, payload.quantity)

    return cart_payload(repo, owner)


@router.patch("/items/{line_id}")
def update_item(
    line_id: str,
    payload: UpdateCartItemIn,
    owner: str = Depends(get_owner),
    repo: InMemoryCartRepo = Depends(get_repo),
):
    line = repo.find_line(owner, line_id)
    if not line:
        raise HTTPException(status_code=404, detail="Cart item not found")

    product = PRODUCTS[line["productId"]]
    stock = _available_stock(product, _variant(product, line["variantId"]))
    if payload.quantity > stock:
        raise HTTPException(status_code=400, detail=f"Cannot set quantity to more than {stock} items")

    line["quantity"] = payload.quantity
    return cart_payload(repo, owner)


@router.delete("/items/{line_id}")
def remove_item(
    line_id: str,
    owner: str = Depends(get_owner),
    repo: InMemoryCartRepo = Depends(get_repo),
):
    if not repo.find_line(owner, line_id):
        raise HTTPException(status_code=404, detail="Cart item not found")

    repo.delete_line(owner, line_id)
    return cart_payload(repo, owner)


@router.delete("")
def clear_cart(owner: str = Depends(get_owner), repo: InMemoryCartRepo = Depends(get_repo)):
    repo.clear(owner)
    return cart_payload(repo, owner)


def create_app() -> FastAPI:
    app = FastAPI(title="Remote Cart Service (dev mock)")
    app.state.cart_repo = InMemoryCartRepo()
    app.include_router(router, prefix="/api")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=3001)
