import uvicorn

from .app.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run("payment_service.app.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
