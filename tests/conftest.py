"""
Shared fixtures.

The store is an in-memory SQLite database (one shared connection through
StaticPool) created from the declarative tables and loaded with a small
catalog. Chatwoot and the agent are real clients talking to a recording
stub session, so no network is touched.
"""
import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from shopbridge.app import create_app
from shopbridge.core.config import (
    AgentConfig,
    ChatwootConfig,
    Config,
    DatabaseConfig,
    WebhookConfig,
)
from shopbridge.core.dependencies import build_container
from shopbridge.db import create_schema
from shopbridge.relay.agent import AgentClient
from shopbridge.relay.chatwoot import ChatwootClient
from shopbridge.services import CartService, ClientService, HandoffService, ProductService, WebhookService
from shopbridge.services.side_channel import SideChannel
from shopbridge.tools.commerce import CommerceTools

CHATWOOT_URL = "https://chat.shop.test"
AGENT_URL = "https://agent.shop.test/webhook"


class StubResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class RecordingSession:
    """Stands in for requests.Session: records every call, answers from routes"""

    def __init__(self):
        self.requests = []
        self.routes = {}

    def respond(self, url_fragment, response):
        """Answer calls whose URL contains url_fragment with a StubResponse or raise an exception"""
        self.routes[url_fragment] = response

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.requests.append({"method": method, "url": url, "json": json, "headers": headers or {}})
        for fragment, response in self.routes.items():
            if fragment in url:
                if isinstance(response, Exception):
                    raise response
                return response
        return StubResponse(200, {"id": len(self.requests)})

    def to(self, url_fragment):
        return [r for r in self.requests if url_fragment in r["url"]]


CATALOG_SQL = [
    "INSERT INTO categories (id, name) VALUES (1, 'Hombre'), (2, 'Unisex')",
    "INSERT INTO garment_types (id, name) VALUES (1, 'Camisa'), (2, 'Sudadera con capucha')",
    "INSERT INTO colors (id, name) VALUES (1, 'Blanco'), (2, 'Negro')",
    "INSERT INTO sizes (id, name) VALUES (1, 'M'), (2, 'L')",
    """
    INSERT INTO products (id, name, description, price, available, category_id, garment_type_id) VALUES
        (1, 'Camisa Oxford', 'Camisa de algodon manga larga', 10.00, 1, 1, 1),
        (2, 'Buzo Canguro', 'Buzo de frisa con capucha', 5.00, 1, 2, 2),
        (3, 'Campera Retirada', 'Campera fuera de catalogo', 80.00, 0, 1, NULL),
        (4, 'Medias 100% algodon', 'Pack de medias', 3.50, 1, NULL, NULL)
    """,
    """
    INSERT INTO product_variants (id, product_id, color_id, size_id, stock) VALUES
        (1, 1, 1, 1, 5),
        (2, 2, 2, 2, 10),
        (3, 3, 2, 1, 4),
        (4, 1, 2, 2, 0),
        (5, 4, NULL, NULL, 3)
    """,
]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_schema(engine)
    with engine.begin() as conn:
        for statement in CATALOG_SQL:
            conn.execute(text(statement))
    yield engine
    engine.dispose()


@pytest.fixture
def http_session():
    return RecordingSession()


@pytest.fixture
def stub_response():
    return StubResponse


@pytest.fixture
def config():
    return Config(
        database=DatabaseConfig(url="sqlite://"),
        chatwoot=ChatwootConfig(base_url=CHATWOOT_URL, account_id="7", api_token="secret-token"),
        agent=AgentConfig(webhook_url=AGENT_URL),
        webhook=WebhookConfig(mode="log", static_reply="Gracias, ya te respondemos."),
    )


@pytest.fixture
def side_channel():
    channel = SideChannel(max_workers=1)
    yield channel
    channel.shutdown()


@pytest.fixture
def container(config, engine, http_session, side_channel):
    return build_container(
        config,
        engine=engine,
        relay=ChatwootClient(config.chatwoot, session=http_session),
        agent=AgentClient(config.agent, session=http_session),
        side_channel=side_channel,
    )


@pytest.fixture
def app(config, container):
    return create_app(config, container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def cart_service(container):
    return container.get(CartService)


@pytest.fixture
def client_service(container):
    return container.get(ClientService)


@pytest.fixture
def product_service(container):
    return container.get(ProductService)


@pytest.fixture
def handoff_service(container):
    return container.get(HandoffService)


@pytest.fixture
def webhook_service(container):
    return container.get(WebhookService)


@pytest.fixture
def tools(container):
    return CommerceTools.from_container(container)


@pytest.fixture
def cart(cart_service):
    """A fresh, empty anonymous cart"""
    return cart_service.create_cart()


@pytest.fixture
def qty_of(engine):
    """Stored qty of a cart line, or None when the row does not exist"""

    def _qty(item_id):
        with engine.connect() as conn:
            row = conn.execute(
                text("SELECT qty FROM cart_items WHERE id = :id"), {"id": item_id}
            ).first()
        return row[0] if row else None

    return _qty


@pytest.fixture
def count_rows(engine):
    def _count(table, where="1 = 1", **params):
        with engine.connect() as conn:
            return conn.execute(text(f"SELECT COUNT(*) FROM {table} WHERE {where}"), params).scalar()

    return _count
