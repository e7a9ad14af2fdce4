import logging
from typing import Any, Optional

from shopbridge.core.exceptions import (
    InsufficientStockError,
    NotFoundError,
    StoreConflictError,
)
from shopbridge.models.cart import (
    AddToCartResult,
    Cart,
    CartItem,
    CartRef,
    CartView,
    parse_cart_ref,
)
from shopbridge.models.product import VariantStock
from shopbridge.relay.chatwoot import ChatwootClient
from shopbridge.repositories.cart_repository import CartRepository
from shopbridge.repositories.product_repository import ProductRepository
from shopbridge.services.side_channel import SideChannel
from shopbridge.utils.formatting_utils import FormattingUtils
from shopbridge.utils.validators import ValidationUtils

logger = logging.getLogger(__name__)

ADD_ITEM_MESSAGE = "Se requiere product_variant_id y qty (mayor a 0)"
UPDATE_QTY_MESSAGE = "Se requiere qty (mayor a 0)"
INVALID_IDS_MESSAGE = "ID de carrito o item inválido"

CART_CREATED_MESSAGE = "Carrito creado exitosamente"
ITEM_ADDED_MESSAGE = "Producto agregado al carrito exitosamente"
ITEM_MERGED_MESSAGE = "Cantidad actualizada en el carrito"
ITEM_UPDATED_MESSAGE = "Cantidad actualizada exitosamente"
ITEM_REMOVED_MESSAGE = "Producto eliminado del carrito exitosamente"


class CartService:
    """
    Cart reconciliation rules

    Responsibilities:
    - Create carts and resolve numeric/opaque cart identifiers
    - Add items with stock validation against the post-merge quantity
    - Keep exactly one line per (cart, variant)
    - Replace quantities and remove lines
    - Label the chat conversation with the garment type, best effort

    Stock is re-read on every mutating call; nothing is cached.
    """

    def __init__(
        self,
        cart_repository: CartRepository,
        product_repository: ProductRepository,
        relay: Optional[ChatwootClient] = None,
        side_channel: Optional[SideChannel] = None,
    ):
        self.cart_repo = cart_repository
        self.product_repo = product_repository
        self.relay = relay
        self.side_channel = side_channel

    @staticmethod
    def add_message(result: AddToCartResult) -> str:
        return ITEM_ADDED_MESSAGE if result.created else ITEM_MERGED_MESSAGE

    # ------------------------------------------------------------------ #
    # Carts                                                                #
    # ------------------------------------------------------------------ #
    def create_cart(self) -> Cart:
        """New anonymous cart with a fresh timestamp"""
        cart = self.cart_repo.create_cart()
        logger.info(f"Created anonymous cart {cart.id} ({cart.public_id})")
        return cart

    def require_cart(self, ref: CartRef) -> Cart:
        cart = self.cart_repo.get_cart(ref)
        if cart is None:
            logger.warning(f"Cart {ref} not found")
            raise NotFoundError(f"No se encontró ningún carrito con el ID {ref}")
        return cart

    def get_cart(self, cart_id: Any) -> CartView:
        """Cart with its joined lines, total and distinct line count"""
        cart = self.require_cart(parse_cart_ref(cart_id))
        lines = self.cart_repo.list_lines(cart.id)
        return CartView(cart=cart, items=lines)

    # ------------------------------------------------------------------ #
    # Items                                                                #
    # ------------------------------------------------------------------ #
    def add_to_cart(
        self,
        cart_id: Any,
        product_variant_id: Any,
        qty: Any,
        conversation_id: Optional[int] = None,
    ) -> AddToCartResult:
        """
        Add qty of a variant to the cart, merging into an existing line.

        Stock is checked against the requested qty and again against the
        merged total. The merged write itself is guarded by the store, so a
        concurrent add cannot push the line past stock.
        """
        cart = self.require_cart(parse_cart_ref(cart_id))
        variant_id = ValidationUtils.parse_positive_int(product_variant_id, ADD_ITEM_MESSAGE)
        qty = ValidationUtils.parse_positive_int(qty, ADD_ITEM_MESSAGE)

        logger.info(f"Adding variant {variant_id} x{qty} to cart {cart.id}")

        variant = self.product_repo.get_variant_stock(variant_id)
        if variant is None:
            logger.warning(f"Variant {variant_id} not found")
            raise NotFoundError(f"No se encontró ninguna variante con el ID {variant_id}")

        if variant.stock < qty:
            raise InsufficientStockError(variant.stock, qty)

        existing = self.cart_repo.find_item_by_variant(cart.id, variant_id)
        if existing is not None:
            result = self._merge(cart, existing, variant, qty)
        else:
            try:
                item = self.cart_repo.insert_item(cart.id, variant_id, qty)
                result = AddToCartResult(item=item, status="created")
            except StoreConflictError:
                # Another request inserted the same variant first
                existing = self.cart_repo.find_item_by_variant(cart.id, variant_id)
                if existing is None:
                    raise
                result = self._merge(cart, existing, variant, qty)

        logger.info(
            f"Cart {cart.id}: item {result.item.id} {result.status} (qty={result.item.qty})"
        )
        self._label_conversation(conversation_id, variant)
        return result

    def _merge(self, cart: Cart, existing: CartItem, variant: VariantStock, qty: int) -> AddToCartResult:
        new_qty = existing.qty + qty
        if variant.stock < new_qty:
            raise InsufficientStockError(variant.stock, new_qty)

        if not self.cart_repo.increment_item_qty(existing.id, qty):
            # Stock or qty moved between the read and the guarded write
            current = self.cart_repo.get_item_with_stock(cart.id, existing.id)
            if current is None:
                raise NotFoundError(f"No se encontró el item {existing.id} en el carrito {cart.id}")
            raise InsufficientStockError(current["stock"], current["item"].qty + qty)

        item = self.cart_repo.get_item(cart.id, existing.id)
        if item is None:
            raise NotFoundError(f"No se encontró el item {existing.id} en el carrito {cart.id}")
        return AddToCartResult(item=item, status="updated")

    def update_cart_item(self, cart_id: Any, item_id: Any, qty: Any) -> CartItem:
        """Replace an item's qty outright; qty is checked against absolute stock"""
        ref = parse_cart_ref(cart_id)
        item_id = ValidationUtils.parse_positive_int(item_id, INVALID_IDS_MESSAGE)
        qty = ValidationUtils.parse_positive_int(qty, UPDATE_QTY_MESSAGE)
        cart = self.require_cart(ref)

        logger.info(f"Updating item {item_id} in cart {cart.id} to qty={qty}")

        current = self.cart_repo.get_item_with_stock(cart.id, item_id)
        if current is None:
            logger.warning(f"Item {item_id} not found in cart {cart.id}")
            raise NotFoundError(f"No se encontró el item {item_id} en el carrito {ref}")

        if current["stock"] < qty:
            raise InsufficientStockError(current["stock"], qty)

        if not self.cart_repo.set_item_qty(cart.id, item_id, qty):
            current = self.cart_repo.get_item_with_stock(cart.id, item_id)
            if current is None:
                raise NotFoundError(f"No se encontró el item {item_id} en el carrito {ref}")
            raise InsufficientStockError(current["stock"], qty)

        item = self.cart_repo.get_item(cart.id, item_id)
        if item is None:
            raise NotFoundError(f"No se encontró el item {item_id} en el carrito {ref}")
        return item

    def remove_from_cart(self, cart_id: Any, item_id: Any) -> str:
        ref = parse_cart_ref(cart_id)
        item_id = ValidationUtils.parse_positive_int(item_id, INVALID_IDS_MESSAGE)
        cart = self.require_cart(ref)

        if not self.cart_repo.delete_item(cart.id, item_id):
            logger.warning(f"Item {item_id} not found in cart {cart.id}")
            raise NotFoundError(f"No se encontró el item {item_id} en el carrito {ref}")

        logger.info(f"Removed item {item_id} from cart {cart.id}")
        return ITEM_REMOVED_MESSAGE

    # ------------------------------------------------------------------ #
    # Side effects                                                         #
    # ------------------------------------------------------------------ #
    def _label_conversation(self, conversation_id: Optional[int], variant: VariantStock) -> None:
        """Schedule a garment-type label on the conversation; never raises"""
        if not conversation_id or not variant.garment_type:
            return
        if self.relay is None or self.side_channel is None or not self.relay.enabled:
            logger.debug("Conversation labeling skipped: relay not configured")
            return

        label = FormattingUtils.to_label(variant.garment_type)
        if not label:
            return

        self.side_channel.submit(
            f"label conversation {conversation_id} with {label!r}",
            self.relay.add_labels,
            conversation_id,
            [label],
        )
