from typing import List, Optional

from fastapi import APIRouter, Depends

from selfiq.core.assessment_catalog import AssessmentCatalog
from selfiq.dependencies import get_access_gate, get_catalog
from selfiq.models.user import User
from selfiq.schemas.assessment import AccessOut, AssessmentDetailOut, AssessmentSummaryOut
from selfiq.services.access import AccessGate
from selfiq.services.auth import get_optional_user

router = APIRouter(prefix="/assessments", tags=["Assessments"])


def _summary(d) -> AssessmentSummaryOut:
    return AssessmentSummaryOut(
        id=d.id,
        name=d.name,
        category_id=d.category_id,
        is_premium=d.is_premium,
        total_questions=d.total_questions,
        description=d.description,
    )


@router.get("", response_model=List[AssessmentSummaryOut])
def list_assessments(category: Optional[str] = None, catalog: AssessmentCatalog = Depends(get_catalog)):
    definitions = catalog.by_category(category) if category else catalog.all()
    return [_summary(d) for d in definitions]


@router.get("/{assessment_id}", response_model=AssessmentDetailOut)
def get_assessment(assessment_id: str, catalog: AssessmentCatalog = Depends(get_catalog)):
    return AssessmentDetailOut.from_definition(catalog.get(assessment_id))


@router.get("/{assessment_id}/access", response_model=AccessOut)
def check_access(
    assessment_id: str,
    gate: AccessGate = Depends(get_access_gate),
    current_user: Optional[User] = Depends(get_optional_user),
):
    identity = current_user.id if current_user else None
    return AccessOut(assessment_id=assessment_id, has_access=gate.can_access(identity, assessment_id))
