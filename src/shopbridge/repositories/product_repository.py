import logging
from typing import Any, Dict, List, Optional

from shopbridge.models.product import Product, ProductVariant, VariantStock, named
from shopbridge.repositories.base import BaseRepository, to_decimal

logger = logging.getLogger(__name__)


def like_pattern(term: str) -> str:
    """Case-insensitive substring pattern; '!' escapes LIKE wildcards."""
    escaped = term.lower().replace("!", "!!").replace("%", "!%").replace("_", "!_")
    return f"%{escaped}%"


class ProductRepository(BaseRepository):
    """Store gateway for the product catalog"""

    table_name = "products"

    _PRODUCT_QUERY = """
        SELECT
            p.id,
            p.name,
            p.description,
            p.price,
            p.available,
            cat.id          AS category_id,
            cat.name        AS category_name,
            gt.id           AS garment_type_id,
            gt.name         AS garment_type_name,
            v.id            AS variant_id,
            v.stock,
            c.id            AS color_id,
            c.name          AS color_name,
            s.id            AS size_id,
            s.name          AS size_name
        FROM products p
        LEFT JOIN categories cat ON cat.id = p.category_id
        LEFT JOIN garment_types gt ON gt.id = p.garment_type_id
        LEFT JOIN product_variants v ON v.product_id = p.id
        LEFT JOIN colors c ON c.id = v.color_id
        LEFT JOIN sizes s ON s.id = v.size_id
    """

    def get_by_id(self, product_id: int) -> Optional[Product]:
        """Product with category, garment type and every variant"""
        rows = self.execute_query(
            self._PRODUCT_QUERY + " WHERE p.id = :product_id ORDER BY v.id",
            {"product_id": product_id},
        )
        if not rows:
            return None
        return self._build_products(rows)[0]

    def list_products(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> List[Product]:
        """
        Available products, optionally filtered by partial (case-insensitive)
        match on name and/or description.
        """
        query = self._PRODUCT_QUERY + " WHERE p.available = :available"
        params: Dict[str, Any] = {"available": True}

        if name:
            query += " AND LOWER(p.name) LIKE :name ESCAPE '!'"
            params["name"] = like_pattern(name)
        if description:
            query += " AND LOWER(p.description) LIKE :description ESCAPE '!'"
            params["description"] = like_pattern(description)

        query += " ORDER BY p.id, v.id"

        return self._build_products(self.execute_query(query, params))

    def get_variant_stock(self, variant_id: int) -> Optional[VariantStock]:
        """Variant stock with its product's price/name and garment type"""
        row = self.execute_single_query(
            """
            SELECT
                v.id,
                v.stock,
                p.id        AS product_id,
                p.name      AS product_name,
                p.price,
                gt.name     AS garment_type
            FROM product_variants v
            JOIN products p ON p.id = v.product_id
            LEFT JOIN garment_types gt ON gt.id = p.garment_type_id
            WHERE v.id = :variant_id
            """,
            {"variant_id": variant_id},
        )
        if not row:
            return None
        return VariantStock(
            id=row["id"],
            stock=int(row["stock"]),
            product_id=row["product_id"],
            product_name=row["product_name"],
            price=to_decimal(row["price"]),
            garment_type=row["garment_type"],
        )

    @staticmethod
    def _build_products(rows: List[Dict[str, Any]]) -> List[Product]:
        """Fold joined product/variant rows into Product objects, keeping order"""
        products: Dict[int, Product] = {}

        for row in rows:
            product = products.get(row["id"])
            if product is None:
                product = Product(
                    id=row["id"],
                    name=row["name"],
                    description=row["description"],
                    price=to_decimal(row["price"]),
                    available=bool(row["available"]),
                    category=named(row, "category"),
                    garment_type=named(row, "garment_type"),
                )
                products[row["id"]] = product

            if row["variant_id"] is not None:
                product.variants.append(
                    ProductVariant(
                        id=row["variant_id"],
                        stock=int(row["stock"]),
                        color=named(row, "color"),
                        size=named(row, "size"),
                    )
                )

        return list(products.values())
