"""Monthly contribution recommendation service.

Generation pipeline:
    generate
        → holding_values              (holdings in base currency)
        → build_recommendation_items
            → summarize_allocation    (class percentages, under/on/over)
            → _collect_candidates     (under-allocated classes only)
            → _distribute             (priority-weighted split, min-value pooling)
            → _round_amounts          (floor to currency places, residue to the top item)

Priority of an asset is ``gap × score / 100`` where gap is its class's
shortfall below target_min in percentage points.  Capital is split in
proportion to priority; when every candidate has score 0 the split falls
back to gap alone.  Assets without a current score use DEFAULT_SCORE.

A class whose share falls below its min_allocation_value is dropped and its
share re-spread over the remaining classes, one class at a time, never
dropping the last one.  The distributed total always equals
total_investable when there is at least one candidate and never exceeds it.

A generated recommendation is committed in its own transaction before it is
cached, so Redis never serves a recommendation the database does not hold.

Confirmation records investments, adds the bought quantities to the
holdings in the database, writes an INVESTMENT_RECORDED event and flips
the recommendation to confirmed in one transaction.  Only after that
transaction has committed does the service emit INVESTMENTS_CONFIRMED and
invalidate the user's cache entries.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from src.domain.errors import (
    AlreadyConfirmed,
    Expired,
    PortfolioNotFound,
    RecommendationNotFound,
    ValidationError,
)
from src.domain.models.allocation import ClassAllocation
from src.domain.models.audit import CalculationEvent
from src.domain.models.enums import AllocationStatus, CalculationEventType
from src.domain.models.exchange import currency_precision
from src.domain.models.numeric import (
    HUNDRED,
    ZERO,
    NumberLike,
    add,
    divide,
    is_negative,
    is_positive,
    multiply,
    quantize,
    quantize_down,
    subtract,
    sum_decimals,
    to_decimal,
    to_plain,
)
from src.domain.models.portfolio import AssetClass, Investment, Portfolio, PortfolioAsset
from src.domain.models.recommendations import (
    ConfirmationResult,
    InvestmentLine,
    Recommendation,
    RecommendationItem,
)
from src.domain.repositories.audit import AuditLog
from src.domain.repositories.cache import RecommendationCache
from src.domain.repositories.portfolios import AssetClassRepository, PortfolioRepository
from src.domain.repositories.recommendations import RecommendationRepository
from src.domain.repositories.scores import ScoreRepository
from src.domain.repositories.unit_of_work import TransactionRepositories, UnitOfWork

from .allocation import holding_values, summarize_allocation
from .currency import CurrencyConverter

logger = logging.getLogger(__name__)

DEFAULT_SCORE = Decimal("50")
QUANTITY_PLACES = 8
_DEFAULT_TTL = timedelta(hours=24)


@dataclass
class _Candidate:
    """Working state for one asset during distribution."""

    asset: PortfolioAsset
    row: ClassAllocation
    score: Decimal
    gap: Decimal
    priority: Decimal
    eligible: bool
    weight: Decimal = ZERO
    amount: Decimal = ZERO


# ------------------------------------------------------------------------- #
# Pure allocation                                                            #
# ------------------------------------------------------------------------- #


def build_recommendation_items(
    portfolio: Portfolio,
    classes: list[AssetClass],
    values: dict[UUID, Decimal],
    scores: dict[UUID, Decimal],
    total_investable: Decimal,
    places: int = 2,
) -> list[RecommendationItem]:
    """Split total_investable across holdings of under-allocated classes.

    Returns [] when no class is under its target minimum.  Otherwise every
    classified, non-ignored holding gets an item; holdings outside
    under-allocated classes carry a zero amount.
    """
    summary = summarize_allocation(portfolio, classes, values)
    if not any(row.status is AllocationStatus.UNDER for row in summary.classes):
        return []

    by_id = {c.class_id: c for c in classes}
    entries = _collect_candidates(portfolio, summary.classes, by_id, scores)
    candidates = [c for c in entries if c.eligible]
    _distribute(candidates, total_investable, by_id)
    _round_amounts(candidates, total_investable, places)

    entries.sort(key=lambda c: (-c.priority, c.asset.symbol))
    return [
        RecommendationItem(
            asset_id=c.asset.asset_id,
            symbol=c.asset.symbol,
            asset_class_id=c.row.class_id,
            asset_class_name=c.row.name,
            score=c.score,
            current_allocation=c.row.current_percent,
            target_allocation=c.row.target_min,
            allocation_gap=c.gap,
            recommended_amount=c.amount,
            is_over_allocated=c.row.status is AllocationStatus.OVER,
        )
        for c in entries
    ]


def _collect_candidates(
    portfolio: Portfolio,
    rows: list[ClassAllocation],
    by_id: dict[UUID, AssetClass],
    scores: dict[UUID, Decimal],
) -> list[_Candidate]:
    def score_of(asset: PortfolioAsset) -> Decimal:
        return scores.get(asset.asset_id, DEFAULT_SCORE)

    entries: list[_Candidate] = []
    for row in rows:
        asset_class = by_id[row.class_id]
        members = sorted(
            (a for a in portfolio.active_assets if a.asset_class_id == row.class_id),
            key=lambda a: (-score_of(a), a.symbol),
        )
        gap = subtract(row.target_min, row.current_percent) if row.status is AllocationStatus.UNDER else ZERO
        for index, asset in enumerate(members):
            score = score_of(asset)
            within_cap = asset_class.max_assets is None or index < asset_class.max_assets
            eligible = is_positive(gap) and within_cap
            priority = divide(multiply(gap, score), HUNDRED) if eligible else ZERO
            entries.append(
                _Candidate(
                    asset=asset,
                    row=row,
                    score=score,
                    gap=gap,
                    priority=priority,
                    eligible=eligible,
                )
            )
    return entries


def _distribute(
    candidates: list[_Candidate],
    total: Decimal,
    by_id: dict[UUID, AssetClass],
) -> None:
    if not candidates:
        return

    gap_only = all(c.priority == ZERO for c in candidates)
    for c in candidates:
        c.weight = c.gap if gap_only else c.priority

    pool = list(candidates)
    while True:
        for c in candidates:
            c.amount = ZERO
        total_weight = sum_decimals(c.weight for c in pool)
        if total_weight == ZERO:
            return
        for c in pool:
            c.amount = divide(multiply(total, c.weight), total_weight)

        class_totals: dict[UUID, Decimal] = {}
        for c in pool:
            class_totals[c.row.class_id] = add(class_totals.get(c.row.class_id, ZERO), c.amount)
        if len(class_totals) <= 1:
            return

        short: list[tuple[Decimal, str, UUID]] = []
        for class_id, amount in class_totals.items():
            minimum = by_id[class_id].min_allocation_value
            if minimum is not None and amount < minimum:
                short.append((amount, by_id[class_id].name, class_id))
        if not short:
            return

        _, name, dropped = min(short)
        logger.debug("Class %s falls below its minimum allocation; redistributing", name)
        pool = [c for c in pool if c.row.class_id != dropped]


def _round_amounts(candidates: list[_Candidate], total: Decimal, places: int) -> None:
    positives = sorted(
        (c for c in candidates if is_positive(c.amount)),
        key=lambda c: (-c.priority, -c.weight, c.asset.symbol),
    )
    for c in candidates:
        c.amount = quantize_down(c.amount, places)
    if not positives:
        return
    residue = subtract(total, sum_decimals(c.amount for c in candidates))
    if residue != ZERO:
        positives[0].amount = add(positives[0].amount, residue)


# ------------------------------------------------------------------------- #
# Service                                                                    #
# ------------------------------------------------------------------------- #


class RecommendationService:
    def __init__(
        self,
        portfolios: PortfolioRepository,
        asset_classes: AssetClassRepository,
        scores: ScoreRepository,
        recommendations: RecommendationRepository,
        cache: RecommendationCache,
        audit: AuditLog,
        unit_of_work: UnitOfWork,
        converter: CurrencyConverter,
        ttl: timedelta = _DEFAULT_TTL,
    ) -> None:
        self._portfolios = portfolios
        self._asset_classes = asset_classes
        self._scores = scores
        self._recommendations = recommendations
        self._cache = cache
        self._audit = audit
        self._uow = unit_of_work
        self._converter = converter
        self._ttl = ttl

    async def generate(
        self,
        user_id: UUID,
        contribution: NumberLike,
        dividends: NumberLike = "0",
        now: datetime | None = None,
    ) -> Recommendation:
        contribution_d = to_decimal(contribution)
        dividends_d = to_decimal(dividends)
        if is_negative(contribution_d) or is_negative(dividends_d):
            raise ValidationError(
                "Contribution and dividends must not be negative",
                details={"contribution": str(contribution), "dividends": str(dividends)},
            )
        total = add(contribution_d, dividends_d)
        if not is_positive(total):
            raise ValidationError("Contribution plus dividends must be greater than zero")

        portfolio = await self._portfolios.get_for_user(user_id)
        if portfolio is None:
            raise PortfolioNotFound(details={"userId": str(user_id)})

        started = time.perf_counter()
        correlation_id = uuid4()
        now = now or datetime.now(timezone.utc)
        await self._event(
            correlation_id,
            user_id,
            CalculationEventType.CALC_STARTED,
            {"contribution": to_plain(contribution_d), "dividends": to_plain(dividends_d)},
        )

        classes = await self._asset_classes.list_for_user(user_id)
        scores = {s.asset_id: s.score for s in await self._scores.list_current(user_id)}
        values = await holding_values(portfolio, self._converter)
        await self._event(
            correlation_id,
            user_id,
            CalculationEventType.RECS_INPUTS_CAPTURED,
            {
                "totalInvestable": to_plain(total),
                "baseCurrency": portfolio.base_currency,
                "classes": [c.model_dump(mode="json") for c in classes],
                "holdings": {str(k): to_plain(v) for k, v in values.items()},
                "scores": {str(k): to_plain(v) for k, v in scores.items()},
            },
        )

        items = build_recommendation_items(
            portfolio,
            classes,
            values,
            scores,
            total,
            places=currency_precision(portfolio.base_currency),
        )
        recommendation = Recommendation(
            user_id=user_id,
            portfolio_id=portfolio.portfolio_id,
            contribution=contribution_d,
            dividends=dividends_d,
            total_investable=total,
            base_currency=portfolio.base_currency,
            items=items,
            correlation_id=correlation_id,
            generated_at=now,
            expires_at=now + self._ttl,
        )
        await self._event(
            correlation_id,
            user_id,
            CalculationEventType.RECS_COMPUTED,
            {
                "itemCount": len(items),
                "totalRecommended": to_plain(recommendation.total_recommended),
            },
        )

        async def persist(tx: TransactionRepositories) -> Recommendation:
            return await tx.recommendations.create(recommendation)

        await self._uow.run_in_transaction(persist)
        # Cache only what is committed; a failed write never reaches Redis.
        await self._cache.set(recommendation, int(self._ttl.total_seconds()))

        duration_ms = int((time.perf_counter() - started) * 1000)
        await self._event(
            correlation_id,
            user_id,
            CalculationEventType.CALC_COMPLETED,
            {"durationMs": duration_ms, "recommendationId": str(recommendation.recommendation_id)},
        )
        logger.info(
            "Recommendation generated with %d items in %d ms",
            len(items),
            duration_ms,
            extra={"correlation_id": str(correlation_id)},
        )
        return recommendation

    async def get_cached(self, user_id: UUID, now: datetime | None = None) -> Recommendation | None:
        """Return the user's usable recommendation, or None.

        Expired and already-confirmed recommendations are treated as absent
        even if the cache or the database still holds them.
        """
        recommendation = await self._cache.get(user_id)
        if recommendation is None:
            recommendation = await self._recommendations.get_latest_for_user(user_id)
        if recommendation is None:
            return None
        if recommendation.is_expired(now) or recommendation.is_confirmed:
            return None
        return recommendation

    async def confirm(
        self,
        user_id: UUID,
        recommendation_id: UUID,
        lines: list[InvestmentLine],
        now: datetime | None = None,
    ) -> ConfirmationResult:
        now = now or datetime.now(timezone.utc)
        _validate_lines(lines)

        async def work(tx: TransactionRepositories) -> ConfirmationResult:
            recommendation = await tx.recommendations.get_by_id(recommendation_id)
            if recommendation is None or recommendation.user_id != user_id:
                raise RecommendationNotFound(details={"recommendationId": str(recommendation_id)})
            if recommendation.is_confirmed:
                raise AlreadyConfirmed(details={"recommendationId": str(recommendation_id)})
            if recommendation.is_expired(now):
                raise Expired(details={"expiresAt": recommendation.expires_at.isoformat()})

            total = sum_decimals(line.actual_amount for line in lines)
            if total > recommendation.total_investable:
                raise ValidationError(
                    "Total invested exceeds the amount available to invest",
                    details={
                        "total": to_plain(total),
                        "totalInvestable": to_plain(recommendation.total_investable),
                    },
                )

            portfolio = await tx.portfolios.get_by_id(recommendation.portfolio_id)
            if portfolio is None:
                raise PortfolioNotFound(details={"portfolioId": str(recommendation.portfolio_id)})

            investments = _build_investments(user_id, portfolio, recommendation, lines, now)
            deltas: dict[UUID, Decimal] = {}
            for inv in investments:
                deltas[inv.asset_id] = add(deltas.get(inv.asset_id, ZERO), inv.quantity)
            for asset_id, delta in deltas.items():
                await tx.portfolios.increment_asset_quantity(asset_id, delta)

            await tx.investments.add_many(investments)
            await tx.audit.record(
                CalculationEvent(
                    correlation_id=recommendation.correlation_id or uuid4(),
                    user_id=user_id,
                    event_type=CalculationEventType.INVESTMENT_RECORDED,
                    payload={
                        "recommendationId": str(recommendation_id),
                        "investments": [i.model_dump(mode="json") for i in investments],
                    },
                )
            )
            if not await tx.recommendations.mark_confirmed(recommendation_id, now):
                raise AlreadyConfirmed(details={"recommendationId": str(recommendation_id)})

            return ConfirmationResult(
                recommendation_id=recommendation_id,
                investments=investments,
                total_invested=sum_decimals(i.total_amount for i in investments),
                confirmed_at=now,
            )

        result = await self._uow.run_in_transaction(work)

        # Committed: safe to publish and drop cached state.
        await self._event(
            uuid4(),
            user_id,
            CalculationEventType.INVESTMENTS_CONFIRMED,
            {
                "recommendationId": str(recommendation_id),
                "investmentCount": len(result.investments),
                "totalInvested": to_plain(result.total_invested),
            },
        )
        await self._cache.invalidate_user(user_id)
        logger.info(
            "Recommendation %s confirmed with %d investments",
            recommendation_id,
            len(result.investments),
        )
        return result

    async def _event(
        self,
        correlation_id: UUID,
        user_id: UUID,
        event_type: CalculationEventType,
        payload: dict,
    ) -> None:
        await self._audit.record(
            CalculationEvent(
                correlation_id=correlation_id,
                user_id=user_id,
                event_type=event_type,
                payload=payload,
            )
        )


def _validate_lines(lines: list[InvestmentLine]) -> None:
    for line in lines:
        if is_negative(line.actual_amount):
            raise ValidationError(
                "Investment amounts must not be negative",
                details={"assetId": str(line.asset_id), "amount": to_plain(line.actual_amount)},
            )
        if is_positive(line.actual_amount) and not is_positive(line.price_per_unit):
            raise ValidationError(
                "Price per unit must be greater than zero",
                details={"assetId": str(line.asset_id)},
            )
        if is_positive(line.actual_amount) and not is_positive(_quantity(line)):
            raise ValidationError(
                f"Amount is too small to buy a quantity at {QUANTITY_PLACES} decimal places",
                details={
                    "assetId": str(line.asset_id),
                    "amount": to_plain(line.actual_amount),
                    "pricePerUnit": to_plain(line.price_per_unit),
                },
            )


def _quantity(line: InvestmentLine) -> Decimal:
    return quantize(divide(line.actual_amount, line.price_per_unit), QUANTITY_PLACES)


def _build_investments(
    user_id: UUID,
    portfolio: Portfolio,
    recommendation: Recommendation,
    lines: list[InvestmentLine],
    now: datetime,
) -> list[Investment]:
    investments: list[Investment] = []
    for line in lines:
        if not is_positive(line.actual_amount):
            continue
        asset = portfolio.find_asset(line.asset_id)
        if asset is None:
            raise ValidationError(
                "Asset is not part of the portfolio",
                details={"assetId": str(line.asset_id)},
            )
        item = recommendation.find_item(line.asset_id)
        investments.append(
            Investment(
                user_id=user_id,
                portfolio_id=portfolio.portfolio_id,
                asset_id=asset.asset_id,
                symbol=asset.symbol,
                quantity=_quantity(line),
                price_per_unit=line.price_per_unit,
                total_amount=line.actual_amount,
                currency=recommendation.base_currency,
                recommendation_id=recommendation.recommendation_id,
                recommended_amount=item.recommended_amount if item else None,
                invested_at=now,
            )
        )
    return investments
