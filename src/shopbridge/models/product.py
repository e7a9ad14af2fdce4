from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


def named(row: Dict[str, Any], prefix: str) -> Optional[Dict[str, Any]]:
    """Collapse `<prefix>_id` / `<prefix>_name` columns into {id, name}."""
    if row.get(f"{prefix}_id") is None:
        return None
    return {"id": row[f"{prefix}_id"], "name": row.get(f"{prefix}_name")}


@dataclass
class VariantStock:
    """
    A variant as seen by cart mutations: stock plus the parent product's
    price/name and optional garment-type classification.
    """
    id: int
    stock: int
    product_id: int
    product_name: str
    price: Decimal
    garment_type: Optional[str] = None


@dataclass
class ProductVariant:
    """A catalog variant with its color and size descriptors"""
    id: int
    stock: int
    color: Optional[Dict[str, Any]] = None
    size: Optional[Dict[str, Any]] = None

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "stock": self.stock,
            "colors": self.color,
            "sizes": self.size,
        }


@dataclass
class Product:
    """A catalog product with its variants"""
    id: int
    name: str
    description: Optional[str]
    price: Decimal
    available: bool
    category: Optional[Dict[str, Any]] = None
    garment_type: Optional[Dict[str, Any]] = None
    variants: List[ProductVariant] = field(default_factory=list)

    @property
    def total_stock(self) -> int:
        return sum(v.stock for v in self.variants)

    def to_dict(self, detailed: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "available": self.available,
            "product_variants": [v.to_dict() for v in self.variants],
        }
        if detailed:
            data["categories"] = self.category
            data["garment_types"] = self.garment_type
        return data
