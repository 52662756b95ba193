from __future__ import annotations

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictStr

from assistant.assistant import CityAssistant, build_assistant
from assistant.core.logs import configure_logging, get_logger
from assistant.core.models import CommandResult
from config.settings import get_settings


settings = get_settings()
log_buffer = configure_logging(settings.log_level, settings.log_buffer_size)
logger = get_logger("server")
request_logger = get_logger("request")
command_logger = get_logger("command")

EXECUTE_PATH = "/api/execute"
INVALID_REQUEST_LINE = "Invalid request: 'input' must be a string."
SERVER_ERROR_LINE = "An error occurred while processing your request."


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if settings.google_api_key:
        logger.info(
            "Gemini configured: models=%s city=%s",
            ",".join(settings.gemini_models),
            settings.city_name,
        )
    else:
        logger.warning("GOOGLE_AI_API_KEY is not set; Gemini features fall back to canned replies")
    logger.info("Dataset directory: %s", settings.data_dir)
    yield


app = FastAPI(title="City Tourist Assistant", version="1.0.0", lifespan=lifespan)

# CORS: allow local frontend during development
if settings.is_dev:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class ExecuteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    input: StrictStr = Field(..., description="Raw text typed by the user")
    user_id: StrictStr = Field(..., alias="userId", description="Client-generated user identifier")


@lru_cache(maxsize=1)
def get_assistant() -> CityAssistant:
    return build_assistant(get_settings())


@app.exception_handler(RequestValidationError)
async def invalid_request(request: Request, exc: RequestValidationError):
    if request.url.path != EXECUTE_PATH:
        return await request_validation_exception_handler(request, exc)
    errors = exc.errors()
    request_logger.warning("Invalid request: %s", errors[0].get("msg") if errors else exc)
    body = CommandResult(type="error", lines=[INVALID_REQUEST_LINE])
    return JSONResponse(status_code=400, content=body.model_dump())


@app.post(EXECUTE_PATH)
def execute(req: ExecuteRequest, assistant: CityAssistant = Depends(get_assistant)):
    command_logger.info('Executing command: "%s" for user: %s', req.input, req.user_id)
    try:
        result = assistant.execute_query(req.input, req.user_id)
    except Exception as e:
        command_logger.exception("Command execution error: %s", e)
        body = CommandResult(type="error", lines=[SERVER_ERROR_LINE])
        return JSONResponse(status_code=500, content=body.model_dump())

    command_logger.info("Command result: %s", result.type)
    return result.model_dump()


@app.get("/api/logs")
def logs() -> Dict[str, Any]:
    return {"logs": [entry.model_dump() for entry in log_buffer.entries()]}


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port)
