import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gymledger.api.v1.auth.router import router as auth_router
from gymledger.api.v1.catalog.router import (
    fixed_values_router,
    modalities_router,
    ranks_router,
    roles_router,
)
from gymledger.api.v1.classes.classes_router import checkin_router, router as classes_router
from gymledger.api.v1.meritocracy.router import analysis_router, router as meritocracy_router
from gymledger.api.v1.reports.router import router as reports_router
from gymledger.api.v1.teachers.router import router as teachers_router
from gymledger.core.logging_config import setup_logging


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="Gym Ledger")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(teachers_router)
    app.include_router(modalities_router)
    app.include_router(roles_router)
    app.include_router(ranks_router)
    app.include_router(fixed_values_router)
    app.include_router(classes_router)
    app.include_router(checkin_router)
    app.include_router(reports_router)
    app.include_router(meritocracy_router)
    app.include_router(analysis_router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("gymledger.main:app", host="0.0.0.0", port=8000)
