# talleres_api/api/v1/router.py
from fastapi import APIRouter
from talleres_api.api.v1 import (
    auth,
    talleres,
    avisos,
    calendario,
    informacion_emergencia,
)

api_router = APIRouter()

api_router.include_router(auth.router,                   prefix="/auth",                    tags=["auth"])
api_router.include_router(talleres.router,               prefix="/talleres",                tags=["talleres"])
api_router.include_router(avisos.router,                 prefix="/avisos",                  tags=["avisos"])
api_router.include_router(calendario.router,             prefix="/calendario",              tags=["calendario"])
api_router.include_router(informacion_emergencia.router, prefix="/informacion-emergencia",  tags=["informacion-emergencia"])
