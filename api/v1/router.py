# api/v1/router.py
from fastapi import APIRouter

from . import meals, nutrition, plans, profiles, targets, tasks

api_router = APIRouter()

api_router.include_router(targets.router, tags=["Targets"])
api_router.include_router(profiles.router, prefix="/users", tags=["Profiles"])
api_router.include_router(nutrition.router, prefix="/users", tags=["Nutrition"])
api_router.include_router(meals.router, prefix="/meals", tags=["Meals"])
api_router.include_router(plans.router, prefix="/plans", tags=["Plans"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
