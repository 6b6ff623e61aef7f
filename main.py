import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from errors import AppError, app_error_handler, unhandled_error_handler, validation_error_handler

# Routers
from routers.health import router as health_router
from routers.problems import router as problems_router

settings = get_settings()

logger = logging.getLogger("math-practice")
logging.basicConfig(level=settings.log_level)

app = FastAPI(title="Math Practice API")

# Allow calls from the Next.js front end
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(problems_router)  # /problem, /problem/submit, /problem/history, ...
app.include_router(health_router)  # /health/...
