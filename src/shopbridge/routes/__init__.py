from shopbridge.routes.carts import carts_bp
from shopbridge.routes.chatwoot import chatwoot_bp
from shopbridge.routes.clients import clients_bp
from shopbridge.routes.products import products_bp

__all__ = ["carts_bp", "chatwoot_bp", "clients_bp", "products_bp"]
