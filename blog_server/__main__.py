"""Run the blog server with uvicorn."""

import uvicorn

from blog_server.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "blog_server.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.server.reload,
    )


if __name__ == "__main__":
    main()
