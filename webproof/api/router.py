from fastapi import APIRouter

from webproof.api.proof.routes import router as proof_router

router = APIRouter()
router.include_router(proof_router)
