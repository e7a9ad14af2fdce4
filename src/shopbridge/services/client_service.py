import logging
from typing import Optional

from shopbridge.core.exceptions import StoreConflictError, ValidationError
from shopbridge.models.client import Client, ClientSession
from shopbridge.repositories.cart_repository import CartRepository
from shopbridge.repositories.client_repository import ClientRepository
from shopbridge.utils.validators import ValidationUtils

logger = logging.getLogger(__name__)


class ClientService:
    """Session start: resolve a client by e-mail and hand back its active cart"""

    def __init__(self, client_repository: ClientRepository, cart_repository: CartRepository):
        self.client_repo = client_repository
        self.cart_repo = cart_repository

    def get_or_create_client(self, name: str, email: str, phone: Optional[str] = None) -> ClientSession:
        """
        Look the client up by e-mail, creating it if needed, then reuse its
        single active cart or open a new one.

        Calling this twice with the same e-mail yields the same client and
        the same cart.
        """
        name = ValidationUtils.clean_optional(name)
        email = ValidationUtils.clean_optional(email)
        if not name or not email:
            raise ValidationError("Se requiere nombre y email")

        email = ValidationUtils.validate_email(email)
        phone = ValidationUtils.clean_optional(phone)

        client, client_created = self._get_or_create(name, email, phone)
        cart, cart_created = self._get_or_open_cart(client.id)

        return ClientSession(
            client_id=client.id,
            cart_id=cart.id,
            cart_status=cart.status,
            client_created=client_created,
            cart_created=cart_created,
        )

    def _get_or_create(self, name: str, email: str, phone: Optional[str]):
        existing = self.client_repo.find_by_email(email)
        if existing is not None:
            self._refresh_phone(existing, phone)
            return existing, False

        try:
            return self.client_repo.create(name, email, phone), True
        except StoreConflictError:
            # Created concurrently under the same e-mail
            existing = self.client_repo.find_by_email(email)
            if existing is None:
                raise
            self._refresh_phone(existing, phone)
            return existing, False

    def _get_or_open_cart(self, client_id: int):
        cart = self.cart_repo.find_active_cart(client_id)
        if cart is not None:
            logger.info(f"Reusing active cart {cart.id} for client {client_id}")
            return cart, False

        try:
            cart = self.cart_repo.create_cart(client_id=client_id, status="active")
        except StoreConflictError:
            # Another session start opened it first
            cart = self.cart_repo.find_active_cart(client_id)
            if cart is None:
                raise
            logger.info(f"Reusing concurrently opened cart {cart.id} for client {client_id}")
            return cart, False

        logger.info(f"Opened active cart {cart.id} for client {client_id}")
        return cart, True

    def _refresh_phone(self, client: Client, phone: Optional[str]) -> None:
        if phone and phone != client.phone:
            self.client_repo.update_phone(client.id, phone)
            client.phone = phone
            logger.info(f"Updated phone for client {client.id}")
