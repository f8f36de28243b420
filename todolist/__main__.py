"""
Server entry point: ``python -m todolist``.

Binds to ``0.0.0.0:$PORT``.
"""

import uvicorn

from todolist.config import settings


def main() -> None:
    uvicorn.run(
        "todolist.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    main()
