from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from api.routes.emotions import router as emotions_router
from api.routes.letters import router as letters_router
from infrastructure.metrics import get_metrics_response

app = FastAPI(title="Emotion Letterbox")

# CORS: allow the letterbox front-end (Vite dev server) to call the API
# Browsers treat localhost and 127.0.0.1 as different origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(emotions_router)
app.include_router(letters_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Return a simple liveness check."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    """Prometheus metrics endpoint in text exposition format."""
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)
