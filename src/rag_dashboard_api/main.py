from fastapi import FastAPI

from rag_dashboard_api.api.query_routes import router as query_router
from rag_dashboard_api.api.routes import router as evaluation_router
from rag_dashboard_api.config import settings
from rag_dashboard_common.observability import TraceContextMiddleware, setup_loguru

setup_loguru(
    settings.app_name,
    log_to_stdout=settings.log_to_stdout,
    log_to_file=settings.log_to_file,
    log_dir=settings.log_dir,
)

app = FastAPI(title=settings.app_name)
app.add_middleware(TraceContextMiddleware)
app.include_router(evaluation_router)
app.include_router(query_router)


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok", "service": settings.app_name}
