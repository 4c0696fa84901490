"""Run the development server: python -m snippetbox"""

import uvicorn

from snippetbox.config import settings


def main() -> None:
    uvicorn.run(
        "snippetbox.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
