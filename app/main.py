import logging
from fastapi import FastAPI

from app.config import LOG_LEVEL
from app.routers import filesystem, shell
from app.services.log_buffer import install_log_buffer

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
install_log_buffer()

app = FastAPI(
    title="KubeShell API",
    description="In-memory shell filesystem with isolated host and container contexts"
)

app.include_router(shell.router)
app.include_router(filesystem.router)


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
