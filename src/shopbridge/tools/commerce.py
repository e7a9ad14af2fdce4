import functools
import logging
from typing import Annotated, Any, Callable, List, Optional, Union

from pydantic import Field

from shopbridge.core.dependencies import DependencyContainer
from shopbridge.core.exceptions import BaseAPIException
from shopbridge.relay.chatwoot import ChatwootClient
from shopbridge.services.cart_service import (
    CART_CREATED_MESSAGE,
    ITEM_UPDATED_MESSAGE,
    CartService,
)
from shopbridge.services.client_service import ClientService
from shopbridge.services.handoff_service import HandoffService
from shopbridge.services.product_service import ProductService
from shopbridge.utils.formatting_utils import FormattingUtils

logger = logging.getLogger(__name__)

CartId = Annotated[Union[int, str], Field(description="ID del carrito (puede ser número o UUID)")]
ConversationId = Annotated[int, Field(description="ID de la conversación de Chatwoot")]


def tool_errors(fn: Callable[..., str]) -> Callable[..., str]:
    """Turn raised errors into tool text prefixed with 'Error:'"""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> str:
        try:
            return fn(*args, **kwargs)
        except BaseAPIException as e:
            logger.warning(f"Tool {fn.__name__} failed: {e.message}")
            return f"Error: {e.message}"
        except Exception as e:
            logger.exception(f"Tool {fn.__name__} crashed")
            return f"Error: {e}"

    return wrapper


class CommerceTools:
    """
    Tool surface for the conversational agent.

    Each tool calls the same services as the REST routes, so validation
    and error text are identical; only the output is rendered as text.
    """

    TOOL_NAMES = (
        "list_products",
        "get_product_details",
        "create_cart",
        "add_to_cart",
        "get_cart",
        "update_cart_item",
        "remove_from_cart",
        "get_or_create_client",
        "request_human_agent",
        "send_chatwoot_message",
        "add_conversation_labels",
        "update_conversation_status",
    )

    def __init__(
        self,
        carts: CartService,
        products: ProductService,
        clients: ClientService,
        handoff: HandoffService,
        relay: ChatwootClient,
    ):
        self.carts = carts
        self.products = products
        self.clients = clients
        self.handoff = handoff
        self.relay = relay

    @classmethod
    def from_container(cls, container: DependencyContainer) -> "CommerceTools":
        return cls(
            carts=container.get(CartService),
            products=container.get(ProductService),
            clients=container.get(ClientService),
            handoff=container.get(HandoffService),
            relay=container.get(ChatwootClient),
        )

    # ------------------------------------------------------------------ #
    # Catalog                                                              #
    # ------------------------------------------------------------------ #
    @tool_errors
    def list_products(
        self,
        name: Annotated[Optional[str], Field(description="Filtro por nombre del producto (búsqueda parcial)")] = None,
        description: Annotated[Optional[str], Field(description="Filtro por descripción del producto (búsqueda parcial)")] = None,
    ) -> str:
        """Lista los productos disponibles con sus variantes (color, talla y stock)."""
        products = self.products.list_products(name=name, description=description)
        data = [p.to_dict() for p in products]
        return f"{self.products.listing_message(products)}\n\n{FormattingUtils.format_json_pretty(data)}"

    @tool_errors
    def get_product_details(
        self,
        productId: Annotated[int, Field(description="ID del producto a consultar")],
    ) -> str:
        """Obtiene los detalles de un producto, incluyendo categoría, tipo de prenda y variantes."""
        product = self.products.get_product(productId)
        return f"Detalles del producto:\n\n{FormattingUtils.format_json_pretty(product.to_dict(detailed=True))}"

    # ------------------------------------------------------------------ #
    # Cart                                                                 #
    # ------------------------------------------------------------------ #
    @tool_errors
    def create_cart(self) -> str:
        """Crea un carrito vacío y devuelve su ID."""
        cart = self.carts.create_cart()
        created = cart.created_at.isoformat() if cart.created_at else "-"
        return (
            f"{CART_CREATED_MESSAGE}\n\n"
            f"ID del carrito: {cart.id}\n"
            f"ID público: {cart.public_id}\n"
            f"Creado: {created}"
        )

    @tool_errors
    def add_to_cart(
        self,
        cartId: CartId,
        productVariantId: Annotated[int, Field(description="ID de la variante del producto (incluye color y talla)")],
        qty: Annotated[int, Field(description="Cantidad del producto")],
        conversationId: Annotated[Optional[int], Field(description="ID de la conversación de Chatwoot, para etiquetarla")] = None,
    ) -> str:
        """Agrega una variante al carrito; si ya estaba, suma la cantidad respetando el stock."""
        result = self.carts.add_to_cart(cartId, productVariantId, qty, conversation_id=conversationId)
        return f"{self.carts.add_message(result)}\n\n{FormattingUtils.format_json_pretty(result.item.to_dict())}"

    @tool_errors
    def get_cart(self, cartId: CartId) -> str:
        """Muestra el carrito con sus productos, el total y la cantidad de items."""
        view = self.carts.get_cart(cartId)
        items = [line.to_dict() for line in view.items]
        return (
            f"Carrito #{cartId}\n\n"
            f"Total de items: {view.item_count}\n"
            f"Total: {FormattingUtils.format_money(view.total)}\n\n"
            f"Productos:\n{FormattingUtils.format_json_pretty(items)}"
        )

    @tool_errors
    def update_cart_item(
        self,
        cartId: CartId,
        itemId: Annotated[int, Field(description="ID del item a actualizar")],
        qty: Annotated[int, Field(description="Nueva cantidad del producto")],
    ) -> str:
        """Reemplaza la cantidad de un item del carrito."""
        item = self.carts.update_cart_item(cartId, itemId, qty)
        return f"{ITEM_UPDATED_MESSAGE}\n\n{FormattingUtils.format_json_pretty(item.to_dict())}"

    @tool_errors
    def remove_from_cart(
        self,
        cartId: CartId,
        itemId: Annotated[int, Field(description="ID del item a eliminar")],
    ) -> str:
        """Elimina un item del carrito."""
        return self.carts.remove_from_cart(cartId, itemId)

    # ------------------------------------------------------------------ #
    # Clients                                                              #
    # ------------------------------------------------------------------ #
    @tool_errors
    def get_or_create_client(
        self,
        name: Annotated[str, Field(description="Nombre del cliente")],
        email: Annotated[str, Field(description="Email del cliente (debe ser válido y único)")],
        phone: Annotated[Optional[str], Field(description="Teléfono del cliente")] = None,
    ) -> str:
        """Obtiene o crea un cliente por email y devuelve su carrito activo."""
        session = self.clients.get_or_create_client(name, email, phone)
        return (
            "Cliente procesado exitosamente:\n\n"
            f"ID del cliente: {session.client_id}\n"
            f"ID del carrito: {session.cart_id}\n"
            f"Estado del carrito: {session.cart_status}"
        )

    # ------------------------------------------------------------------ #
    # Chatwoot                                                             #
    # ------------------------------------------------------------------ #
    @tool_errors
    def request_human_agent(
        self,
        conversationId: ConversationId,
        reason: Annotated[
            Optional[str],
            Field(
                description=(
                    "Motivo: 'reembolso' para devoluciones de dinero, 'producto_danado' si el "
                    "producto llegó dañado o defectuoso, 'otros' para cualquier otro motivo"
                )
            ),
        ] = None,
    ) -> str:
        """Transfiere la conversación a un agente humano."""
        return self.handoff.request_human_agent(conversationId, reason)

    @tool_errors
    def send_chatwoot_message(
        self,
        conversationId: ConversationId,
        message: Annotated[str, Field(description="Contenido del mensaje a enviar al cliente")],
    ) -> str:
        """Envía un mensaje al cliente en una conversación de Chatwoot."""
        result = self.relay.send_message(conversationId, message)
        return (
            f"Mensaje enviado exitosamente a la conversación #{conversationId}\n\n"
            f"{FormattingUtils.format_json_pretty(result)}"
        )

    @tool_errors
    def add_conversation_labels(
        self,
        conversationId: ConversationId,
        labels: Annotated[List[str], Field(description='Etiquetas a agregar (ej: ["venta_completada", "producto_camisa"])')],
    ) -> str:
        """Agrega etiquetas a una conversación de Chatwoot."""
        self.relay.add_labels(conversationId, labels)
        return f"Etiquetas agregadas exitosamente: {', '.join(labels)}"

    @tool_errors
    def update_conversation_status(
        self,
        conversationId: ConversationId,
        status: Annotated[str, Field(description='Estado de la conversación: "open", "resolved" o "pending"')],
    ) -> str:
        """Cambia el estado de una conversación de Chatwoot."""
        self.relay.update_status(conversationId, status)
        return f"Estado de conversación actualizado a: {status}"


def register_tools(server: Any, tools: CommerceTools) -> None:
    """Attach every commerce tool to a FastMCP server"""
    for name in CommerceTools.TOOL_NAMES:
        fn = getattr(tools, name)
        server.add_tool(fn, name=name, description=fn.__doc__)
    logger.info(f"Registered {len(CommerceTools.TOOL_NAMES)} tools")
