import logging

import uvicorn

from glfstat.config import get_settings


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    uvicorn.run("glfstat.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
