import os

import uvicorn
from fastapi import FastAPI

from a11y.__version__ import __version__
from api.routes.results import router as results_router
from api.routes.scan import router as scan_router
from core.analyzer import get_registry

app = FastAPI(
    title="portal-a11y API",
    description="Crawl portal sections and browse their accessibility results",
    version=__version__,
)
app.include_router(scan_router, prefix="/api")
app.include_router(results_router, prefix="/api")


@app.get("/")
def read_root():
    return {"message": "Welcome to the portal-a11y API", "version": __version__}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/api/rules")
def list_rules():
    rules = {name: analyzer.description for name, analyzer in get_registry().list().items()}
    return {"count": len(rules), "rules": rules}


if __name__ == "__main__":
    uvicorn.run(app, host=os.getenv("API_HOST", "0.0.0.0"), port=int(os.getenv("API_PORT", 8000)))
