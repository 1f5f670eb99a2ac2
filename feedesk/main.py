from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feedesk.api.v1.balances.router import router as balances_router
from feedesk.api.v1.classes.router import router as classes_router
from feedesk.api.v1.extra_charges.router import router as extra_charges_router
from feedesk.api.v1.fee_structures.router import router as fee_structures_router
from feedesk.api.v1.quarters.router import router as quarters_router
from feedesk.api.v1.students.router import router as students_router
from feedesk.api.v1.transactions.router import router as transactions_router
from feedesk.core.config import settings
from feedesk.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="School Fee Desk")

    # CORS: admin console and parent portal are served from a separate origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(classes_router)
    app.include_router(students_router)
    app.include_router(quarters_router)
    app.include_router(fee_structures_router)
    app.include_router(extra_charges_router)
    app.include_router(transactions_router)
    app.include_router(balances_router)

    return app


app = create_app()
