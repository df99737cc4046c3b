from prometheus_fastapi_instrumentator import Instrumentator

from . import create_app
from .core.config import settings
from .core.logging import configure_logging

configure_logging(settings.LOG_LEVEL)
app = create_app()
Instrumentator().instrument(app).expose(app, include_in_schema=False)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
