import logging
import os
import socket

from greenhub.logging_config import configure_logging
from greenhub.ui.dash_app import create_dash_app

configure_logging()
logger = logging.getLogger("greenhub.app")

app = create_dash_app(os.getenv("GREENHUB_CONFIG_ROOT", "config"))
server = app.server


def find_free_port(start_port: int, attempts: int = 100) -> int:
    """First port from start_port that nothing on localhost is listening on."""
    for port in range(start_port, start_port + attempts):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            if s.connect_ex(("localhost", port)) != 0:
                return port
    return start_port


if __name__ == "__main__":
    preferred_port = int(os.getenv("PORT", "8050"))
    port = find_free_port(preferred_port)
    debug = os.getenv("DEBUG", "0") == "1"

    if port != preferred_port:
        logger.warning("Preferred port taken", extra={"preferred_port": preferred_port, "port": port})

    logger.info("Starting GreenHub", extra={"port": port, "debug": debug})
    app.run(host="0.0.0.0", port=port, debug=debug)
