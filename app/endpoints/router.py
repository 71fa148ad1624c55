from fastapi import APIRouter

from app.endpoints.v1 import activity_api, auth_api, reports_api, tasks_api, teams_api, users_api

api_router = APIRouter(prefix="/api")

api_router.include_router(auth_api.router)
api_router.include_router(users_api.router)
api_router.include_router(teams_api.router)
api_router.include_router(tasks_api.router)
api_router.include_router(reports_api.router)
api_router.include_router(activity_api.router)
