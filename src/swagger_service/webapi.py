import asyncio
import logging
import os

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError

try:
    from swagger_service.conversion import Outcome, ServiceDefinitionContainer, SwaggerConversionService
    from swagger_service.conversion.adapters import BallerinaSwaggerConverter
except ImportError:
    # Allow running as a script: `python src/swagger_service/webapi.py`
    import sys as _sys
    from pathlib import Path as _Path
    _sys.path.append(str(_Path(__file__).resolve().parents[1]))  # add ./src to sys.path
    from swagger_service.conversion import Outcome, ServiceDefinitionContainer, SwaggerConversionService
    from swagger_service.conversion.adapters import BallerinaSwaggerConverter

LOGGER = logging.getLogger(__name__)

app = FastAPI(
    title="Swagger Service",
    version=os.getenv("SWAGGER_SERVICE_VERSION", "0.1.0"),
    description=(
        "RESTful API converting Ballerina service definitions into Swagger "
        "documents and back."
    ),
)

ACCESS_CONTROL_ALLOW_ORIGIN = ("Access-Control-Allow-Origin", "*")
ACCESS_CONTROL_ALLOW_HEADERS = ("Access-Control-Allow-Headers", "content-type")
ACCESS_CONTROL_ALLOW_METHODS = ("Access-Control-Allow-Methods", "OPTIONS, POST")

SERVICE: SwaggerConversionService | None = None


def get_service() -> SwaggerConversionService:
    global SERVICE
    if SERVICE is None:
        SERVICE = SwaggerConversionService(BallerinaSwaggerConverter())
    return SERVICE


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"Error": message},
        headers=dict([ACCESS_CONTROL_ALLOW_ORIGIN]),
    )


async def _read_container(request: Request) -> tuple[ServiceDefinitionContainer, str]:
    payload = await request.json()
    if not isinstance(payload, dict):
        raise ValueError("request body must be a JSON object")
    return ServiceDefinitionContainer.model_validate(payload), ServiceDefinitionContainer.naming_of(payload)


@app.get("/health")
def health() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.post("/service/swagger/ballerina-to-swagger")
async def convert_to_swagger(
    request: Request,
    service_name: str | None = Query(None, alias="serviceName"),
    service: SwaggerConversionService = Depends(get_service),
) -> Response:
    """Generate a Swagger definition from the container's Ballerina source.

    Returns the container with `swaggerDefinition` populated, or 400 with an
    `Error` message when the source cannot be converted.
    """
    try:
        container, naming = await _read_container(request)
    except (ValueError, ValidationError) as e:
        return _error_response(f"{e.__class__.__name__}: {e}")

    # Parsing is blocking; keep it off the event loop.
    result = await asyncio.to_thread(service.to_swagger, container, service_name)
    if result.outcome == Outcome.FAILED:
        return _error_response(result.message or "")
    return JSONResponse(content=result.container.to_payload(naming), headers=dict([ACCESS_CONTROL_ALLOW_ORIGIN]))


@app.post("/service/swagger/swagger-to-ballerina")
async def convert_to_ballerina(
    request: Request,
    service: SwaggerConversionService = Depends(get_service),
) -> Response:
    """Validate the container and run the Swagger to Ballerina conversion.

    Missing input is answered with 204 and a plain-text hint. The container is
    echoed back unchanged on success.
    """
    try:
        container, naming = await _read_container(request)
    except (ValueError, ValidationError) as e:
        return _error_response(f"{e.__class__.__name__}: {e}")

    result = await asyncio.to_thread(service.to_ballerina, container)
    if result.outcome == Outcome.MISSING_INPUT:
        return PlainTextResponse(content=result.message or "", status_code=status.HTTP_204_NO_CONTENT)
    if result.outcome == Outcome.FAILED:
        return _error_response(result.message or "")
    return JSONResponse(content=result.container.to_payload(naming), headers=dict([ACCESS_CONTROL_ALLOW_ORIGIN]))


def _cors_headers() -> Response:
    # Content-Type is set explicitly so no charset suffix is appended.
    return Response(
        status_code=status.HTTP_200_OK,
        headers=dict(
            [
                ACCESS_CONTROL_ALLOW_ORIGIN,
                ACCESS_CONTROL_ALLOW_HEADERS,
                ACCESS_CONTROL_ALLOW_METHODS,
                ("Content-Type", "text/plain"),
            ]
        ),
    )


@app.options("/service/swagger/ballerina-to-swagger")
def cors_convert_to_swagger() -> Response:
    return _cors_headers()


@app.options("/service/swagger/swagger-to-ballerina")
def cors_convert_to_ballerina() -> Response:
    return _cors_headers()


def run() -> None:
    """Run a development ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:8080). Set PORT env var to override.
    """
    import uvicorn

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    # Enable reload in dev unless explicitly disabled
    reload = os.getenv("RELOAD", "true").lower() in {"1", "true", "yes", "on"}

    uvicorn.run("swagger_service.webapi:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
