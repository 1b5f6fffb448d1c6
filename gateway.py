"""
MCP Servers Gateway

Hosts every configured backend over streamable HTTP:
    /notion/  - search(), fetch()
    /sqlite/  - read_query(), list_tables(), describe_table(), update()
    /whoami/  - whoami()
"""

import uvicorn

from mcp_servers.config import SERVER_HOST, SERVER_PORT, SHUTDOWN_GRACE_SECONDS
from mcp_servers.logger import get_logger, uvicorn_log_level
from mcp_servers.server import build_app

log = get_logger("gateway")


def run(host: str = SERVER_HOST, port: int | None = None) -> None:
    port = port or SERVER_PORT
    log.info(f"Starting HTTP server on {host}:{port}")
    uvicorn.run(
        build_app(),
        host=host,
        port=port,
        timeout_graceful_shutdown=SHUTDOWN_GRACE_SECONDS,
        log_level=uvicorn_log_level(),
    )


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="MCP Servers Gateway")
    parser.add_argument("--host", default=SERVER_HOST)
    parser.add_argument("-p", "--port", type=int, default=SERVER_PORT)

    args = parser.parse_args()
    run(args.host, args.port)
