from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from tracksurvey import config
from tracksurvey.routers.results import router as results_router
from tracksurvey.routers.submit import router as submit_router
from tracksurvey.routers.tracks import router as tracks_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s:%(name)s:%(message)s",
)

app = FastAPI(title="Track Survey")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True, allow_methods=["*"], allow_headers=["*"],
)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(tracks_router)
app.include_router(submit_router)
app.include_router(results_router)
