from fastapi import APIRouter

router = APIRouter(prefix="/api", tags=["workflows"])

# Deshabilitado en deploy: la generación real corre por /api/chatflows/generate
@router.get("/test-workflow")
async def test_workflow():
    return {"message": "Test workflow endpoint disabled"}
