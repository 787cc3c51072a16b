import os
from fastapi import FastAPI, Request
from fastapi.logger import logger
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from src.api.common.exceptions import EngineError
from src.api.routes import api_router

app = FastAPI(
    title="Contracts",
    description="Contract value computation, installment scheduling and commission approval",
    version="1.0.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.category, "detail": exc.message},
    )


# Add all endpoints from the API with an "api" prefix
app.include_router(api_router, prefix="/api")


@app.get("/health")
def health_check():
    return {"status": "healthy"}


# this only runs if `$ python src/main.py` is executed
if __name__ == '__main__':
    import uvicorn
    PORT = int(os.environ.get('PORT', 3001))
    uvicorn.run("src.main:app", host='0.0.0.0', port=PORT, reload=True)
