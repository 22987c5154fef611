import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from formulasnap.errors import RecognitionError
from formulasnap.routes import router
from formulasnap.store import get_store
from formulasnap.ws import ws_endpoint

logger = logging.getLogger("formulasnap")


@asynccontextmanager
async def lifespan(_: FastAPI):
    load_dotenv()
    store = get_store()
    logger.info("Settings loaded from %s", store.path)
    yield


app = FastAPI(title="FormulaSnap", lifespan=lifespan)


@app.exception_handler(RecognitionError)
async def recognition_error_handler(_request: Request, exc: RecognitionError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "error_type": exc.error_type},
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.add_api_websocket_route("/ws", ws_endpoint)
