from typing import List, Optional

from fastapi import APIRouter, Depends

from selfiq.core.settings import settings
from selfiq.dependencies import get_result_archive
from selfiq.exceptions import NotFoundException, ValidationException
from selfiq.models.user import User
from selfiq.schemas.result import PopularTestOut, ResultHistoryOut, ResultOut, StatisticsOut
from selfiq.services.auth import get_current_user
from selfiq.services.result_archive import ResultArchive

router = APIRouter(prefix="/results", tags=["Results"])


def _out(result) -> ResultOut:
    return ResultOut.from_result(result, settings.score_raw_min, settings.score_raw_max)


@router.get("/latest/{test_id}", response_model=ResultOut)
def latest_result(
    test_id: str,
    archive: ResultArchive = Depends(get_result_archive),
    current_user: User = Depends(get_current_user),
):
    result = archive.latest(current_user.id, test_id)
    if not result:
        raise NotFoundException(f"No result found for assessment {test_id}")
    return _out(result)


@router.get("/history", response_model=ResultHistoryOut)
def result_history(
    limit: int = 20,
    cursor: Optional[str] = None,
    archive: ResultArchive = Depends(get_result_archive),
    current_user: User = Depends(get_current_user),
):
    if limit <= 0 or limit > 100:
        raise ValidationException("limit must be between 1 and 100")
    try:
        items, next_cursor = archive.history_page(current_user.id, limit=limit, cursor=cursor)
    except ValueError:
        raise ValidationException("Invalid cursor")
    return ResultHistoryOut(results=[_out(r) for r in items], next_cursor=next_cursor)


@router.get("/statistics", response_model=StatisticsOut)
def result_statistics(
    archive: ResultArchive = Depends(get_result_archive),
    current_user: User = Depends(get_current_user),
):
    stats = archive.statistics(current_user.id)
    if stats is None:
        raise NotFoundException("No completed assessments")
    return StatisticsOut(
        total_completed=stats.total_completed,
        average_score=stats.average_score,
        last_test_date=stats.last_test_date,
        unique_tests_taken=stats.unique_tests_taken,
    )


@router.get("/popular", response_model=List[PopularTestOut])
def popular_tests(limit: int = 10, archive: ResultArchive = Depends(get_result_archive)):
    if limit <= 0 or limit > 50:
        raise ValidationException("limit must be between 1 and 50")
    return [PopularTestOut(**row) for row in archive.popular_tests(limit)]
