"""Daily rental charge generation."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from fleetledger.config import Settings
from fleetledger.database.base import CHARGES, Database
from fleetledger.database.mappers import charge_to_row
from fleetledger.domain.batch import BatchWriter
from fleetledger.domain.entities import BillableResource, RecurringCharge, RecurringSubscriber
from fleetledger.domain.summary import RunSummary
from fleetledger.utils.date_parser import iter_days, start_of_day, today_in

logger = logging.getLogger(__name__)

SKIP_INACTIVE = "inactive driver"
SKIP_UNASSIGNED = "no assigned vehicle"
SKIP_NO_RESOURCE = "vehicle not found"
SKIP_NO_RATE = "vehicle has no daily rate"
SKIP_NO_CONTRACT = "no contract date"
SKIP_NOT_STARTED = "contract starts after range"
SKIP_UP_TO_DATE = "up to date"


@dataclass(frozen=True)
class StartDatePolicy:
    """Decides the first billable day of a subscriber.

    Without a cutoff every subscriber is billed from their own contract date,
    or from the run's reference start when the contract date is unknown.
    With a cutoff everyone is billed from that single date, unless their
    contract starts later.
    """

    cutoff: Optional[date] = None

    @classmethod
    def per_subscriber(cls) -> "StartDatePolicy":
        return cls()

    @classmethod
    def fixed_cutoff(cls, cutoff: date) -> "StartDatePolicy":
        return cls(cutoff=cutoff)

    def needs_contract_date(self, reference_start: Optional[date] = None) -> bool:
        """True when a missing contract date leaves no first day to bill from."""
        return self.cutoff is None and reference_start is None

    def start_for(
        self, subscriber: RecurringSubscriber, reference_start: Optional[date] = None
    ) -> Optional[date]:
        """First billable day, or None if it cannot be determined."""
        candidates = []
        if self.cutoff is not None:
            candidates.append(self.cutoff)
        if subscriber.contract_start_date is not None:
            candidates.append(subscriber.contract_start_date)
        elif self.needs_contract_date(reference_start):
            return None
        if reference_start is not None:
            candidates.append(reference_start)
        return max(candidates)

    def describe(self) -> str:
        if self.cutoff is None:
            return "per-subscriber contract date"
        return f"fixed cutoff {self.cutoff.isoformat()}"


class RecurringChargeGenerator:
    """Computes the charges missing for each billable day.

    Pure computation: nothing is read or written here, callers load the
    existing charges and persist the result.
    """

    def __init__(self, policy: Optional[StartDatePolicy] = None):
        self.policy = policy or StartDatePolicy.per_subscriber()

    def skip_reason(
        self,
        subscriber: RecurringSubscriber,
        resource: Optional[BillableResource],
        reference_start: Optional[date] = None,
    ) -> Optional[str]:
        """Why a subscriber cannot be billed, or None if it can."""
        if not subscriber.active:
            return SKIP_INACTIVE
        if not subscriber.assigned_resource_id:
            return SKIP_UNASSIGNED
        if resource is None:
            return SKIP_NO_RESOURCE
        if resource.daily_rate is None or resource.daily_rate <= 0:
            return SKIP_NO_RATE
        if subscriber.contract_start_date is None and self.policy.needs_contract_date(reference_start):
            return SKIP_NO_CONTRACT
        return None

    def billing_range(
        self,
        subscriber: RecurringSubscriber,
        reference_start: Optional[date],
        reference_end: date,
    ) -> Optional[tuple[date, date]]:
        """Inclusive day range to cover, or None when it is empty."""
        start = self.policy.start_for(subscriber, reference_start)
        if start is None or start > reference_end:
            return None
        return start, reference_end

    def generate_for_subscriber(
        self,
        subscriber: RecurringSubscriber,
        resource: BillableResource,
        existing_charges: Iterable[RecurringCharge],
        reference_start: Optional[date],
        reference_end: date,
    ) -> list[RecurringCharge]:
        """Charges for the days of the range not yet covered."""
        day_range = self.billing_range(subscriber, reference_start, reference_end)
        if day_range is None:
            return []
        first, last = day_range

        # Day granularity: older charges carry the time they were created at
        covered = {
            charge.billing_date.date()
            for charge in existing_charges
            if charge.subscriber_id == subscriber.id and first <= charge.billing_date.date() <= last
        }

        return [
            RecurringCharge(
                subscriber_id=subscriber.id,
                resource_id=resource.id,
                billing_date=start_of_day(day),
                amount=resource.daily_rate,
                resource_label=resource.label,
            )
            for day in iter_days(first, last)
            if day not in covered
        ]

    def generate(
        self,
        subscribers: Sequence[RecurringSubscriber],
        resources: Sequence[BillableResource],
        existing_charges: Sequence[RecurringCharge],
        reference_start: Optional[date],
        reference_end: date,
    ) -> list[RecurringCharge]:
        """Charges missing for all eligible subscribers.

        Running again with the returned charges added to ``existing_charges``
        yields an empty list.
        """
        resources_by_id = {resource.id: resource for resource in resources}
        known = list(existing_charges)
        generated: list[RecurringCharge] = []

        for subscriber in subscribers:
            resource = resources_by_id.get(subscriber.assigned_resource_id)
            reason = self.skip_reason(subscriber, resource, reference_start)
            if reason is not None:
                logger.warning("Driver %s skipped: %s", subscriber.name, reason)
                continue
            charges = self.generate_for_subscriber(
                subscriber, resource, known, reference_start, reference_end
            )
            known.extend(charges)
            generated.extend(charges)

        return generated


class RentalChargeService:
    """Service that brings every billable driver's charges up to date."""

    def __init__(self, db: Database, settings: Settings):
        """Initialize rental charge service.

        Args:
            db: Database instance
            settings: Runtime settings (timezone, batch ceiling, cutoff)
        """
        self.db = db
        self.settings = settings

    def default_policy(self) -> StartDatePolicy:
        if self.settings.charge_cutoff is not None:
            return StartDatePolicy.fixed_cutoff(self.settings.charge_cutoff)
        return StartDatePolicy.per_subscriber()

    def run(
        self,
        reference_end: Optional[date] = None,
        reference_start: Optional[date] = None,
        policy: Optional[StartDatePolicy] = None,
        dry_run: bool = False,
    ) -> RunSummary:
        """Create the missing charges up to ``reference_end`` (default: today).

        Args:
            reference_end: Last day to bill, inclusive
            reference_start: Optional earliest day to bill
            policy: Start date policy (default from settings)
            dry_run: Compute without writing

        Returns:
            RunSummary; ``created`` counts committed charges
        """
        if reference_end is None:
            reference_end = today_in(self.settings.tz)
        generator = RecurringChargeGenerator(policy or self.default_policy())
        summary = RunSummary(job="Rental charges", dry_run=dry_run)
        writer = BatchWriter(self.db, self.settings.max_operations_per_batch)

        subscribers = self.db.list_billable_subscribers()
        logger.info(
            "Generating rental charges through %s (%s) for %d drivers",
            reference_end.isoformat(),
            generator.policy.describe(),
            len(subscribers),
        )

        planned = 0
        for subscriber in subscribers:
            summary.examined += 1
            try:
                resource = self.db.get_resource(subscriber.assigned_resource_id)
                reason = generator.skip_reason(subscriber, resource, reference_start)
                if reason is not None:
                    logger.warning("Driver %s skipped: %s", subscriber.name, reason)
                    summary.skip(reason)
                    continue

                day_range = generator.billing_range(subscriber, reference_start, reference_end)
                if day_range is None:
                    summary.skip(SKIP_NOT_STARTED)
                    continue
                first, last = day_range
                existing = self.db.list_charges(
                    subscriber.id,
                    start=start_of_day(first),
                    end=start_of_day(last + timedelta(days=1)),
                )
            except SQLAlchemyError:
                logger.exception("Failed to load charges for driver %s", subscriber.name)
                summary.failed += 1
                continue

            charges = generator.generate_for_subscriber(
                subscriber, resource, existing, reference_start, reference_end
            )
            if not charges:
                logger.info("Driver %s is up to date", subscriber.name)
                summary.skip(SKIP_UP_TO_DATE)
                continue

            logger.info("Driver %s: %d missing charges", subscriber.name, len(charges))
            planned += len(charges)
            if not dry_run:
                for charge in charges:
                    writer.create(CHARGES, charge_to_row(charge))

        if dry_run:
            summary.created = planned
        else:
            writer.flush()
            summary.created = writer.committed
            summary.failed += writer.failed

        logger.info("Rental charge run finished: %s", summary.as_dict())
        return summary
