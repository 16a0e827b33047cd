from __future__ import annotations

from fastapi import APIRouter, Depends

from stash_api.api.deps import get_analyze_content_use_case, require_active_subscription
from stash_api.api.schemas.ai import AnalyzeRequest, ClassificationResponse
from stash_api.application.dto.auth import AccessTokenPayload
from stash_api.application.dto.classification import AnalyzeContentInput
from stash_api.application.use_cases.analyze_content import AnalyzeContentUseCase


router = APIRouter()


@router.post("/ai/analyze", response_model=ClassificationResponse)
def analyze(
    req: AnalyzeRequest,
    _identity: AccessTokenPayload = Depends(require_active_subscription),
    use_case: AnalyzeContentUseCase = Depends(get_analyze_content_use_case),
):
    result = use_case.execute(
        AnalyzeContentInput(
            content_type=req.content_type,
            url=req.url,
            metadata=req.metadata or {},
            image_base64=req.image_base64,
            folder_hints=req.folder_hints(),
        )
    )
    return ClassificationResponse(
        title=result.title,
        description=result.description,
        tags=result.tags,
        suggested_folders=result.suggested_folders,
        category=result.category,
    )
