import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lppdownlink.config import cors_origins
from lppdownlink.routers import downlinks, lpp

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="LPP Downlink Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(lpp.router)
app.include_router(downlinks.router)

@app.get("/health")
def health():
    return {"ok": True}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("lppdownlink.main:app", host="0.0.0.0", port=8000, reload=True)
