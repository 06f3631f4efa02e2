"""Run the service with uvicorn: ``python -m zipreview``."""

import uvicorn

from zipreview.config import settings


def main() -> None:
    uvicorn.run("zipreview.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
