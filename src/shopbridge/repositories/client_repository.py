import logging
from typing import Optional

from shopbridge.models.client import Client
from shopbridge.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ClientRepository(BaseRepository):
    """Store gateway for clients, keyed by e-mail"""

    table_name = "clients"

    def find_by_email(self, email: str) -> Optional[Client]:
        row = self.execute_single_query(
            "SELECT id, name, email, phone FROM clients WHERE email = :email",
            {"email": email},
        )
        return Client(**row) if row else None

    def create(self, name: str, email: str, phone: Optional[str] = None) -> Client:
        client_id = self.execute_insert_returning_id(
            "INSERT INTO clients (name, email, phone) VALUES (:name, :email, :phone)",
            {"name": name, "email": email, "phone": phone},
        )
        logger.info(f"Created client {client_id} <{email}>")
        return Client(id=client_id, name=name, email=email, phone=phone)

    def update_phone(self, client_id: int, phone: str) -> None:
        self.execute_command(
            "UPDATE clients SET phone = :phone WHERE id = :client_id",
            {"phone": phone, "client_id": client_id},
        )
