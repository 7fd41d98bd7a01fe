"""Run the relay. Usage: python -m qris_relay.server (or the ``qris-relay`` script)."""

import uvicorn

from qris_relay.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "qris_relay.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
