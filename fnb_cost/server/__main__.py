"""Run the API with uvicorn: ``python -m fnb_cost.server``."""

import uvicorn

from .core.config import settings


def main() -> None:
    uvicorn.run(
        "fnb_cost.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
