import logging
import re
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from database.connection import init_db
from app.api import api_router
from app.api.deps import get_pass_coordinator
from app.core.config import settings
from app.core.errors import LoyaltyError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    init_db()
    yield
    # Shutdown
    get_pass_coordinator().close()


logger = logging.getLogger(__name__)


class DynamicCORSMiddleware(BaseHTTPMiddleware):
    """CORS middleware that supports wildcard subdomains in production."""

    def __init__(self, app, origin_pattern: str, environment: str):
        super().__init__(app)
        self.origin_pattern = re.compile(origin_pattern)
        self.environment = environment

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")

        # Handle preflight requests
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)

        if origin:
            if self.environment != "production" or self.origin_pattern.match(origin):
                response.headers["Access-Control-Allow-Origin"] = origin
                response.headers["Access-Control-Allow-Credentials"] = "true"
            else:
                logger.warning(f"CORS rejected - Origin '{origin}' does not match pattern")

        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization, X-Requested-With"

        return response


async def loyalty_error_handler(request: Request, exc: LoyaltyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Loyalty Card API",
        description="Visit and reward tracking with Apple and Google Wallet passes",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        DynamicCORSMiddleware,
        origin_pattern=settings.cors_origin_pattern,
        environment=settings.environment,
    )

    app.add_exception_handler(LoyaltyError, loyalty_error_handler)

    # Include all routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
