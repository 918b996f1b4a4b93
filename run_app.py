import uvicorn

from src.config import settings


def main() -> None:
    """Run the FastAPI application with uvicorn."""
    uvicorn.run(
        "src.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
