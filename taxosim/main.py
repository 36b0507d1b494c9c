"""Start a single FastAPI uvicorn worker for development."""
import uvicorn


if __name__ == "__main__":
    uvicorn.run(
        "taxosim.server:APP",
        host="0.0.0.0",
        port=6430,
        reload=True,
        reload_dirs=["taxosim"],
    )
