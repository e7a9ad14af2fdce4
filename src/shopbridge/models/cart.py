import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from shopbridge.core.exceptions import ValidationError
from shopbridge.utils.validators import ValidationUtils

INVALID_CART_ID = "ID de carrito inválido"

_OPAQUE_ID = re.compile(r"^[A-Za-z0-9-]{1,64}$")


@dataclass(frozen=True)
class NumericCartRef:
    """Cart addressed by its integer primary key"""
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OpaqueCartRef:
    """Cart addressed by its public (UUID-shaped) identifier"""
    value: str

    def __str__(self) -> str:
        return self.value


CartRef = Union[NumericCartRef, OpaqueCartRef]


def parse_cart_ref(raw: Any) -> CartRef:
    """
    Resolve a caller-supplied cart identifier once, at the boundary.

    Integers and ASCII all-digit strings are numeric ids and must fit a
    BIGINT; alphanumeric/hyphen tokens are opaque ids. Anything else is
    rejected.
    """
    if isinstance(raw, bool):
        raise ValidationError(INVALID_CART_ID)
    if isinstance(raw, int):
        return NumericCartRef(ValidationUtils.parse_positive_int(raw, INVALID_CART_ID))

    token = str(raw).strip() if raw is not None else ""
    if ValidationUtils.is_decimal_token(token):
        return NumericCartRef(ValidationUtils.parse_positive_int(token, INVALID_CART_ID))
    if _OPAQUE_ID.match(token):
        return OpaqueCartRef(token)
    raise ValidationError(INVALID_CART_ID)


@dataclass
class Cart:
    """A cart row as stored"""
    id: int
    public_id: str
    status: str
    created_at: Optional[datetime] = None
    client_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "public_id": self.public_id,
            "client_id": self.client_id,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class CartItem:
    """A (cart, variant, qty) row as stored"""
    id: int
    cart_id: int
    product_variant_id: int
    qty: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "cart_id": self.cart_id,
            "product_variant_id": self.product_variant_id,
            "qty": self.qty,
        }


@dataclass
class CartLine:
    """A cart item joined with its variant, product, color and size"""
    id: int
    qty: int
    variant_id: int
    stock: int
    product_id: int
    product_name: str
    product_description: Optional[str]
    price: Decimal
    color: Optional[Dict[str, Any]] = None
    size: Optional[Dict[str, Any]] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.qty

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "qty": self.qty,
            "product_variants": {
                "id": self.variant_id,
                "stock": self.stock,
                "products": {
                    "id": self.product_id,
                    "name": self.product_name,
                    "description": self.product_description,
                    "price": float(self.price),
                },
                "colors": self.color,
                "sizes": self.size,
            },
        }


@dataclass
class CartView:
    """A cart with its lines and computed totals"""
    cart: Cart
    items: List[CartLine] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.items), Decimal("0"))

    @property
    def item_count(self) -> int:
        # Distinct lines, not summed quantities
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cart": self.cart.to_dict(),
            "items": [line.to_dict() for line in self.items],
            "total": float(self.total),
            "itemCount": self.item_count,
        }


@dataclass
class AddToCartResult:
    """Outcome of add_to_cart: the written row and which path wrote it"""
    item: CartItem
    status: str  # "created" | "updated"

    @property
    def created(self) -> bool:
        return self.status == "created"
