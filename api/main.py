from fastapi import FastAPI

from api.reports import router as reports_router

app = FastAPI(
    title="University Expenses Report",
    description="Downloadable expenses and income report",
    version="0.1.0",
)

app.include_router(reports_router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
