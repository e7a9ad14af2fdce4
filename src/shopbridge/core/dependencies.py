import logging
from typing import Any, Callable, Dict, Optional, Type, TypeVar

import requests
from sqlalchemy.engine import Engine

from shopbridge.core.config import Config
from shopbridge.db.engine import create_db_engine
from shopbridge.relay.agent import AgentClient
from shopbridge.relay.chatwoot import ChatwootClient
from shopbridge.repositories import (
    CartRepository,
    ClientRepository,
    ProductRepository,
)
from shopbridge.services import (
    CartService,
    ClientService,
    HandoffService,
    ProductService,
    SideChannel,
    WebhookService,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DependencyContainer:
    """Simple dependency injection container"""

    def __init__(self):
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}

    def register_singleton(self, service_class: Type[T], instance: T) -> None:
        key = self._get_service_key(service_class)
        self._services[key] = instance

    def register_factory(self, service_class: Type[T], factory: Callable[[], T]) -> None:
        """Register a factory; the first instance it builds is cached"""
        key = self._get_service_key(service_class)
        self._factories[key] = factory

    def get(self, service_class: Type[T]) -> T:
        key = self._get_service_key(service_class)

        if key in self._services:
            return self._services[key]

        if key in self._factories:
            instance = self._factories[key]()
            self._services[key] = instance
            return instance

        raise ValueError(f"Service {service_class.__name__} not registered")

    def has(self, service_class: Type[Any]) -> bool:
        key = self._get_service_key(service_class)
        return key in self._services or key in self._factories

    def shutdown(self) -> None:
        """Drain the side channel and release pooled connections"""
        if self.has(SideChannel):
            self.get(SideChannel).shutdown()
        if self.has(Engine):
            self.get(Engine).dispose()

    def _get_service_key(self, service_class: Type[Any]) -> str:
        return f"{service_class.__module__}.{service_class.__qualname__}"


def build_container(
    config: Config,
    engine: Optional[Engine] = None,
    relay: Optional[ChatwootClient] = None,
    agent: Optional[AgentClient] = None,
    side_channel: Optional[SideChannel] = None,
) -> DependencyContainer:
    """
    Wire repositories, relay clients and services for one process.

    Every collaborator can be overridden; anything not passed is built
    from config.
    """
    container = DependencyContainer()
    container.register_singleton(Config, config)

    engine = engine or create_db_engine(config.database)
    container.register_singleton(Engine, engine)

    session = requests.Session()
    relay = relay or ChatwootClient(config.chatwoot, session=session)
    agent = agent or AgentClient(config.agent, session=session)
    side_channel = side_channel or SideChannel(max_pending=config.app.side_task_backlog)
    container.register_singleton(ChatwootClient, relay)
    container.register_singleton(AgentClient, agent)
    container.register_singleton(SideChannel, side_channel)

    if not relay.enabled:
        logger.warning("Chatwoot credentials missing; relay calls will fail and labeling is skipped")

    container.register_factory(CartRepository, lambda: CartRepository(engine))
    container.register_factory(ProductRepository, lambda: ProductRepository(engine))
    container.register_factory(ClientRepository, lambda: ClientRepository(engine))

    container.register_factory(
        CartService,
        lambda: CartService(
            container.get(CartRepository),
            container.get(ProductRepository),
            relay=relay,
            side_channel=side_channel,
        ),
    )
    container.register_factory(ProductService, lambda: ProductService(container.get(ProductRepository)))
    container.register_factory(
        ClientService,
        lambda: ClientService(container.get(ClientRepository), container.get(CartRepository)),
    )
    container.register_factory(HandoffService, lambda: HandoffService(relay))
    container.register_factory(WebhookService, lambda: WebhookService(config.webhook, relay, agent))

    return container
