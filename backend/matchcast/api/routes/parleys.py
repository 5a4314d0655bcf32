from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from matchcast.application.dtos.dtos import ParleyDTO
from matchcast.application.use_cases.get_parley_use_case import GetParleyUseCase
from matchcast.api.dependencies import get_parley_use_case

router = APIRouter(tags=["Parleys"])
logger = logging.getLogger(__name__)


@router.get(
    "/parley-del-dia",
    response_model=ParleyDTO,
    responses={404: {"description": "Not enough high-confidence picks today"}},
)
async def get_parley_of_the_day(use_case: GetParleyUseCase = Depends(get_parley_use_case)):
    """
    Get the parley of the day: three high-confidence picks from different matches.
    """
    parley = await use_case.execute()
    if parley is None:
        return JSONResponse(
            status_code=404,
            content={"message": "No exciting parley of the day was found today. Come back soon!"},
        )
    return parley
