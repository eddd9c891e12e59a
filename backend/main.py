import uvicorn
from factory_tracker.core.config import settings


def main():
    """Start the FastAPI backend server."""
    uvicorn.run("factory_tracker.main:app", host=settings.HOST, port=settings.PORT, reload=True)


if __name__ == "__main__":
    main()
