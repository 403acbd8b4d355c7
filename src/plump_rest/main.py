# src/plump_rest/main.py
"""
Dev backend: the REST shape RestStore talks to, served from MemoryStore.

    python -m plump_rest.main
"""
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from plump_rest.api.errors import (
    http_exception_handler,
    invariant_violation_handler,
    not_found_handler,
    request_validation_exception_handler,
)
from plump_rest.api.records import router as records_router
from plump_rest.config import settings
from plump_rest.errors import InvariantViolation, NotFound

app = FastAPI(
    title="plump-rest dev backend",
    description="In-memory REST backend for the plump REST storage adapter.",
    version="0.1.0",
)


# Root endpoint
@app.get("/")
def root():
    return {"status": "plump-rest dev backend running"}


app.include_router(records_router)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(NotFound, not_found_handler)
app.add_exception_handler(InvariantViolation, invariant_violation_handler)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "plump_rest.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=True,
    )
