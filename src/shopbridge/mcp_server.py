import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from shopbridge.app import configure_logging
from shopbridge.core.config import Config
from shopbridge.core.dependencies import DependencyContainer, build_container
from shopbridge.tools.commerce import CommerceTools, register_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "shopbridge"
INSTRUCTIONS = (
    "Herramientas de la tienda: catálogo de productos, carrito de compras, "
    "clientes y conversaciones de Chatwoot."
)


def build_server(config: Config, container: Optional[DependencyContainer] = None) -> FastMCP:
    """FastMCP server with every commerce tool bound to this process's services"""
    container = container or build_container(config)
    server = FastMCP(
        SERVER_NAME,
        instructions=INSTRUCTIONS,
        host=config.app.mcp_host,
        port=config.app.mcp_port,
    )
    register_tools(server, CommerceTools.from_container(container))
    return server


def main(config: Optional[Config] = None) -> None:
    config = config or Config.from_env()
    config.validate()
    configure_logging(config.app.log_level)

    container = build_container(config)
    server = build_server(config, container)
    logger.info(f"MCP server listening on {config.app.mcp_host}:{config.app.mcp_port}")
    try:
        server.run(transport="streamable-http")
    finally:
        container.shutdown()


if __name__ == "__main__":
    main()
