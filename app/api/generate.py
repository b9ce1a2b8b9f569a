"""
Generation Routes

Single-shot study tools. Each route validates via the generation service
and returns either a parsed result or a raw-text fallback.
"""

from fastapi import APIRouter, Depends

from app.dependencies import get_generation_service
from orchestration.generation import GenerationService
from schemas.request import (
    EssayGradeRequest,
    FlashcardsRequest,
    HintRequest,
    QuizRequest,
    ReferenceRequest,
    ResourcesRequest,
    SummarizeRequest,
    TranslateRequest,
)
from schemas.response import FlashcardsResponse, QuizResponse


router = APIRouter(tags=["Generation"])


@router.post("/generate-quiz", response_model=QuizResponse, response_model_exclude_none=True)
@router.post("/quiz", response_model=QuizResponse, response_model_exclude_none=True)
async def generate_quiz(
    request: QuizRequest,
    service: GenerationService = Depends(get_generation_service),
) -> QuizResponse:
    result = await service.quiz(request.topic, request.count, request.difficulty)
    if result.ok:
        return QuizResponse(quiz=result.parsed)
    return QuizResponse(raw=result.raw)


@router.post("/flashcards", response_model=FlashcardsResponse, response_model_exclude_none=True)
async def generate_flashcards(
    request: FlashcardsRequest,
    service: GenerationService = Depends(get_generation_service),
) -> FlashcardsResponse:
    result = await service.flashcards(request.topic, request.count)
    if result.ok:
        return FlashcardsResponse(flashcards=result.parsed)
    return FlashcardsResponse(raw=result.raw)


@router.post("/summarize")
async def summarize(
    request: SummarizeRequest,
    service: GenerationService = Depends(get_generation_service),
):
    return {"summary": await service.summarize(request.text, request.length)}


@router.post("/translate")
async def translate(
    request: TranslateRequest,
    service: GenerationService = Depends(get_generation_service),
):
    translation = await service.translate(request.text, request.target_language, request.source_language)
    return {"translation": translation}


@router.post("/grade-essay")
async def grade_essay(
    request: EssayGradeRequest,
    service: GenerationService = Depends(get_generation_service),
):
    return {"grading": await service.grade_essay(request.essay, request.question, request.level)}


@router.post("/format-reference")
async def format_reference(
    request: ReferenceRequest,
    service: GenerationService = Depends(get_generation_service),
):
    return {"reference": await service.format_reference(request.source, request.style)}


@router.post("/hint")
async def hint(
    request: HintRequest,
    service: GenerationService = Depends(get_generation_service),
):
    return {"hint": await service.hint(request.problem, request.subject)}


@router.post("/recommend-resources")
async def recommend_resources(
    request: ResourcesRequest,
    service: GenerationService = Depends(get_generation_service),
):
    return {"resources": await service.recommend_resources(request.topic, request.level)}
