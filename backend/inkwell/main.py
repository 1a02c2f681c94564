from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .db import init_db
from .settings import settings
from .routers import auth
from .routers import users
from .routers import assessments
from .routers import stories

app = FastAPI(title="Inkwell API")
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(assessments.router)
app.include_router(stories.router)


@app.exception_handler(RequestValidationError)
async def invalid_input_handler(request: Request, exc: RequestValidationError):
	return JSONResponse(status_code=400, content={"detail": "Invalid input: missing required fields"})


@app.get("/health")
def health():
	return {"status": "ok", "model": settings.ollama_model}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	init_db()
