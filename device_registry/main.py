from prometheus_fastapi_instrumentator import Instrumentator

from device_registry import app as registry_app
from device_registry.core.config import settings
from device_registry.core.logging import setup_logging

setup_logging()
app = registry_app
instrumentator = Instrumentator(excluded_handlers=["/health", "/metrics"])
instrumentator.instrument(app).expose(app, include_in_schema=False)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


def run() -> None:
    import uvicorn

    uvicorn.run("device_registry.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
