"""
API v1 routes.
"""

from fastapi import APIRouter

from worldkernel.api.v1 import auth, forms, kernels, navigation, profiles

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(kernels.router, prefix="/kernels", tags=["Kernels"])
router.include_router(forms.router, prefix="/forms/kernel", tags=["Forms"])
router.include_router(profiles.router)
router.include_router(navigation.router)
