"""FastAPI application exposing the submission example."""

from fastapi import FastAPI
from fastapi import Request
from fastapi import Response

from apikit.core.errors import register_error_handlers
from apikit.request import parse_request
from apikit.request import path_param_extractor
from apikit.response import send_response
from apikit.schemas.submission import SubmitRequest
from apikit.schemas.submission import SubmitResponse

app = FastAPI(title="apikit")
register_error_handlers(app)


@app.post("/submit/{id}")
async def submit(request: Request) -> Response:
    """Parse a submission from the body and the ``id`` route parameter."""
    payload = await parse_request(request, SubmitRequest, path_param_extractor, "id")
    return send_response(200, SubmitResponse(id=payload.id, name=payload.name, age=payload.age))


@app.get("/health")
def health() -> dict[str, str]:
    """Health check stub endpoint for service readiness."""
    return {"status": "ok"}
