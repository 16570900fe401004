from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping, Optional

CONFORMANCE = "CONFORMANCE"
OBSERVATION = "OBSERVATION"
MINOR_NC = "MINOR_NC"
MAJOR_NC = "MAJOR_NC"

RATING_POINTS = {
    CONFORMANCE: 2,
    OBSERVATION: 1,
    MINOR_NC: 0,
    MAJOR_NC: -2,
}
MAX_POINTS = max(RATING_POINTS.values())
MIN_POINTS = min(RATING_POINTS.values())

NONCONFORMING_RATINGS = (MINOR_NC, MAJOR_NC)

YES, NO, PARTLY, NA = "YES", "NO", "PARTLY", "NA"
CHECKLIST_VALUES = (YES, NO, PARTLY, NA)


def round_half_up(numerator: int, denominator: int) -> int:
    """Redondeo comercial (x.5 hacia arriba), no el bancario de round()."""
    value = Decimal(numerator) / Decimal(denominator)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def score_for_rating(rating: str) -> int:
    try:
        return RATING_POINTS[rating]
    except KeyError:
        raise ValueError(f"Unknown rating: {rating!r}")


def is_nonconforming(rating: str) -> bool:
    return rating in NONCONFORMING_RATINGS


@dataclass(frozen=True)
class AuditScore:
    score: int
    rated_count: int
    total_count: int
    points: int


def compute_audit_score(ratings: Iterable[str], total_count: Optional[int] = None) -> AuditScore:
    """
    Puntaje agregado 0..100 de una auditoría.
    Solo cuentan los indicadores calificados: min/max posibles se calculan sobre ellos,
    así que los no calificados no afectan numerador ni denominador.
    """
    points = 0
    rated = 0
    for rating in ratings:
        points += score_for_rating(rating)
        rated += 1

    if total_count is None:
        total_count = rated
    if rated == 0:
        return AuditScore(score=0, rated_count=0, total_count=total_count, points=0)

    min_possible = MIN_POINTS * rated
    max_possible = MAX_POINTS * rated
    score = round_half_up(100 * (points - min_possible), max_possible - min_possible)
    return AuditScore(score=score, rated_count=rated, total_count=total_count, points=points)


@dataclass(frozen=True)
class ChecklistEntry:
    item_key: str
    is_critical: bool = False
    section: str = "HYGIENE"


@dataclass(frozen=True)
class DocumentQualityScore:
    score: int
    critical_failures: int
    applicable_count: int


def compute_dqs(items: Iterable, responses: Mapping[str, str]) -> DocumentQualityScore:
    """
    DQS = (YES + 0.5 * PARTLY) / aplicables, con NA fuera del denominador.
    `items` necesita `item_key` e `is_critical` (sirve el modelo o ChecklistEntry).
    """
    yes = partly = applicable = critical_failures = 0
    for item in items:
        value = responses.get(item.item_key)
        if value is None or value == NA:
            continue
        applicable += 1
        if value == YES:
            yes += 1
        elif value == PARTLY:
            partly += 1
        elif value == NO and item.is_critical:
            critical_failures += 1

    if applicable == 0:
        return DocumentQualityScore(score=0, critical_failures=critical_failures, applicable_count=0)
    # 2*yes + partly sobre 2*aplicables evita floats
    score = round_half_up(100 * (2 * yes + partly), 2 * applicable)
    return DocumentQualityScore(score=score, critical_failures=critical_failures, applicable_count=applicable)
