# cartsync/domain/schemas.py
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field


def cart_total(items: List["CartLine"]) -> Decimal:
    return sum((i.price * i.quantity for i in items), Decimal("0"))


class CartLineIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: str = Field(..., min_length=1, description="Catalog product id")
    variant_id: str | None = None
    title: str = ""
    price: Decimal = Field(..., ge=0, description="Effective price at the time of add")
    quantity: int = Field(..., gt=0, description="Quantity (must be > 0)")
    image: str | None = None

    @property
    def key(self) -> tuple[str, str | None]:
        return (self.product_id, self.variant_id)


class CartLine(CartLineIn):
    """One product(+variant) entry of a cart."""

    id: str


class CartState(BaseModel):
    """Cart read model: ordered lines plus total."""

    items: List[CartLine] = Field(default_factory=list)
    total: Decimal = Decimal("0")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_items(cls, items: List[CartLine]) -> "CartState":
        return cls(items=items, total=cart_total(items))


class CartResult(BaseModel):
    """Outcome of a cart store operation."""

    ok: bool
    cart: CartState
    reason: str | None = None
    detail: str | None = None

    @classmethod
    def success(cls, cart: CartState, reason: str | None = None) -> "CartResult":
        return cls(ok=True, cart=cart, reason=reason)

    @classmethod
    def failure(cls, cart: CartState, reason: str, detail: str | None = None) -> "CartResult":
        return cls(ok=False, cart=cart, reason=reason, detail=detail)


# remote cart service payloads

class RemoteProduct(BaseModel):
    title: str
    price: Decimal
    discounted: Decimal | None = None
    gallery: List[str] | None = None

    model_config = ConfigDict(extra="ignore")

    @property
    def effective_price(self) -> Decimal:
        return self.discounted if self.discounted is not None else self.price


class RemoteCartLine(BaseModel):
    id: str
    product_id: str = Field(..., alias="productId")
    variant_id: str | None = Field(None, alias="variantId")
    quantity: int
    product: RemoteProduct

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_cart_line(self) -> CartLine:
        return CartLine(
            id=self.id,
            product_id=self.product_id,
            variant_id=self.variant_id,
            title=self.product.title,
            price=self.product.effective_price,
            quantity=self.quantity,
            image=self.product.gallery[0] if self.product.gallery else None,
        )


class RemoteCart(BaseModel):
    items: List[RemoteCartLine] = Field(default_factory=list)
    total: Decimal = Decimal("0")

    model_config = ConfigDict(extra="ignore")

    def to_state(self) -> CartState:
        # server total is taken as is
        return CartState(items=[i.to_cart_line() for i in self.items], total=self.total)


class AddCartItemIn(BaseModel):
    """Schema for POST /cart/items."""

    product_id: str = Field(..., alias="productId", min_length=1)
    variant_id: str | None = Field(None, alias="variantId")
    quantity: int = Field(..., gt=0, description="Quantity (must be > 0)")

    model_config = ConfigDict(populate_by_name=True)


class UpdateCartItemIn(BaseModel):
    """Schema for PATCH /cart/items/{id}."""

    quantity: int = Field(..., gt=0, description="Quantity (must be > 0)")
