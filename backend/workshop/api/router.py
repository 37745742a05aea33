from fastapi import APIRouter
from workshop.api.routers import auth, admin, checklists, budgets, links, public, dashboard

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(checklists.router, prefix="/checklists", tags=["checklists"])
api_router.include_router(budgets.router, prefix="/budgets", tags=["budgets"])
api_router.include_router(links.router, prefix="/links", tags=["links"])
api_router.include_router(public.router, prefix="/public", tags=["public"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
