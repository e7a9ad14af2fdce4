import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from shopbridge.models.cart import (
    Cart,
    CartItem,
    CartLine,
    CartRef,
    NumericCartRef,
)
from shopbridge.models.product import named
from shopbridge.repositories.base import BaseRepository, to_datetime, to_decimal

logger = logging.getLogger(__name__)


class CartRepository(BaseRepository):
    """Store gateway for carts and cart items"""

    table_name = "carts"

    _CART_COLUMNS = "id, public_id, client_id, status, created_at"

    # ------------------------------------------------------------------ #
    # Carts                                                                #
    # ------------------------------------------------------------------ #
    def create_cart(self, client_id: Optional[int] = None, status: str = "active") -> Cart:
        cart_id = self.execute_insert_returning_id(
            """
            INSERT INTO carts (public_id, client_id, status, created_at)
            VALUES (:public_id, :client_id, :status, :created_at)
            """,
            {
                "public_id": str(uuid.uuid4()),
                "client_id": client_id,
                "status": status,
                "created_at": datetime.now(timezone.utc),
            },
        )
        cart = self.get_cart(NumericCartRef(cart_id))
        logger.info(f"Created cart {cart_id} (client={client_id}, status={status})")
        return cart

    def get_cart(self, ref: CartRef) -> Optional[Cart]:
        column = "id" if isinstance(ref, NumericCartRef) else "public_id"
        row = self.execute_single_query(
            f"SELECT {self._CART_COLUMNS} FROM carts WHERE {column} = :ref",
            {"ref": ref.value},
        )
        return self._build_cart(row) if row else None

    def find_active_cart(self, client_id: int) -> Optional[Cart]:
        row = self.execute_single_query(
            f"""
            SELECT {self._CART_COLUMNS}
            FROM carts
            WHERE client_id = :client_id AND status = 'active'
            ORDER BY id
            LIMIT 1
            """,
            {"client_id": client_id},
        )
        return self._build_cart(row) if row else None

    # ------------------------------------------------------------------ #
    # Items                                                                #
    # ------------------------------------------------------------------ #
    def get_item(self, cart_id: int, item_id: int) -> Optional[CartItem]:
        row = self.execute_single_query(
            """
            SELECT id, cart_id, product_variant_id, qty
            FROM cart_items
            WHERE id = :item_id AND cart_id = :cart_id
            """,
            {"item_id": item_id, "cart_id": cart_id},
        )
        return self._build_item(row) if row else None

    def get_item_with_stock(self, cart_id: int, item_id: int) -> Optional[Dict[str, Any]]:
        """Item row plus its variant's current stock, scoped to the cart"""
        row = self.execute_single_query(
            """
            SELECT ci.id, ci.cart_id, ci.product_variant_id, ci.qty, v.stock
            FROM cart_items ci
            JOIN product_variants v ON v.id = ci.product_variant_id
            WHERE ci.id = :item_id AND ci.cart_id = :cart_id
            """,
            {"item_id": item_id, "cart_id": cart_id},
        )
        if not row:
            return None
        return {"item": self._build_item(row), "stock": int(row["stock"])}

    def find_item_by_variant(self, cart_id: int, variant_id: int) -> Optional[CartItem]:
        row = self.execute_single_query(
            """
            SELECT id, cart_id, product_variant_id, qty
            FROM cart_items
            WHERE cart_id = :cart_id AND product_variant_id = :variant_id
            """,
            {"cart_id": cart_id, "variant_id": variant_id},
        )
        return self._build_item(row) if row else None

    def insert_item(self, cart_id: int, variant_id: int, qty: int) -> CartItem:
        """
        Insert a new line. Raises StoreConflictError when the variant is
        already in the cart (uq_cart_item_variant).
        """
        item_id = self.execute_insert_returning_id(
            """
            INSERT INTO cart_items (cart_id, product_variant_id, qty)
            VALUES (:cart_id, :variant_id, :qty)
            """,
            {"cart_id": cart_id, "variant_id": variant_id, "qty": qty},
        )
        return CartItem(id=item_id, cart_id=cart_id, product_variant_id=variant_id, qty=qty)

    def increment_item_qty(self, item_id: int, delta: int) -> bool:
        """
        Add delta to an item's qty in place, only if the result still fits
        the variant's stock at write time. False when nothing was written.
        """
        affected = self.execute_command(
            """
            UPDATE cart_items
            SET qty = qty + :delta
            WHERE id = :item_id
              AND qty + :delta <= (
                  SELECT v.stock FROM product_variants v
                  WHERE v.id = cart_items.product_variant_id
              )
            """,
            {"item_id": item_id, "delta": delta},
        )
        return affected > 0

    def set_item_qty(self, cart_id: int, item_id: int, qty: int) -> bool:
        """Overwrite qty, only if it fits the variant's stock at write time"""
        affected = self.execute_command(
            """
            UPDATE cart_items
            SET qty = :qty
            WHERE id = :item_id
              AND cart_id = :cart_id
              AND :qty <= (
                  SELECT v.stock FROM product_variants v
                  WHERE v.id = cart_items.product_variant_id
              )
            """,
            {"item_id": item_id, "cart_id": cart_id, "qty": qty},
        )
        return affected > 0

    def delete_item(self, cart_id: int, item_id: int) -> bool:
        affected = self.execute_command(
            "DELETE FROM cart_items WHERE id = :item_id AND cart_id = :cart_id",
            {"item_id": item_id, "cart_id": cart_id},
        )
        return affected > 0

    def list_lines(self, cart_id: int) -> List[CartLine]:
        """Cart items joined with variant, product, color and size"""
        rows = self.execute_query(
            """
            SELECT
                ci.id            AS item_id,
                ci.qty,
                v.id             AS variant_id,
                v.stock,
                p.id             AS product_id,
                p.name           AS product_name,
                p.description    AS product_description,
                p.price,
                c.id             AS color_id,
                c.name           AS color_name,
                s.id             AS size_id,
                s.name           AS size_name
            FROM cart_items ci
            JOIN product_variants v ON v.id = ci.product_variant_id
            JOIN products p ON p.id = v.product_id
            LEFT JOIN colors c ON c.id = v.color_id
            LEFT JOIN sizes s ON s.id = v.size_id
            WHERE ci.cart_id = :cart_id
            ORDER BY ci.id
            """,
            {"cart_id": cart_id},
        )
        return [
            CartLine(
                id=row["item_id"],
                qty=row["qty"],
                variant_id=row["variant_id"],
                stock=row["stock"],
                product_id=row["product_id"],
                product_name=row["product_name"],
                product_description=row["product_description"],
                price=to_decimal(row["price"]),
                color=named(row, "color"),
                size=named(row, "size"),
            )
            for row in rows
        ]

    # ------------------------------------------------------------------ #
    # Row builders                                                         #
    # ------------------------------------------------------------------ #
    @staticmethod
    def _build_cart(row: Dict[str, Any]) -> Cart:
        return Cart(
            id=row["id"],
            public_id=row["public_id"],
            client_id=row["client_id"],
            status=row["status"],
            created_at=to_datetime(row["created_at"]),
        )

    @staticmethod
    def _build_item(row: Dict[str, Any]) -> CartItem:
        return CartItem(
            id=row["id"],
            cart_id=row["cart_id"],
            product_variant_id=row["product_variant_id"],
            qty=row["qty"],
        )
