"""Run the relay with uvicorn: ``python -m stockalert``."""
import uvicorn

from stockalert.core.config import settings


def main() -> None:
    uvicorn.run(
        "stockalert.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        proxy_headers=True,
        forwarded_allow_ips="*",
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
