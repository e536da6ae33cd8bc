from __future__ import annotations

from fastapi import FastAPI

from api.rule_analysis import router as rule_analysis_router


def create_app() -> FastAPI:
    app = FastAPI(title="Rule Analysis")
    app.include_router(rule_analysis_router)
    return app


app = create_app()
