from shopbridge.services.cart_service import CartService
from shopbridge.services.client_service import ClientService
from shopbridge.services.handoff_service import HandoffService
from shopbridge.services.product_service import ProductService
from shopbridge.services.side_channel import SideChannel
from shopbridge.services.webhook_service import WebhookService

__all__ = [
    "CartService",
    "ClientService",
    "HandoffService",
    "ProductService",
    "SideChannel",
    "WebhookService",
]
