from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Client:
    id: int
    name: str
    email: str
    phone: Optional[str] = None


@dataclass
class ClientSession:
    """Result of get-or-create: the client and the active cart to scope to"""
    client_id: int
    cart_id: int
    cart_status: str
    client_created: bool = False
    cart_created: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clientId": self.client_id,
            "cartId": self.cart_id,
            "cartStatus": self.cart_status,
        }
