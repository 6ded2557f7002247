# apps/stock_counts/services.py
"""
Stock count service.

StockCountService handles:
- Creating counts (from an explicit item list or from a bin's stock)
- Moving counts through the workflow (start, claim, submit, approve, reject, recount)
- Saving counted quantities in all-or-nothing batches
- Applying approved variances to inventory
- Generating the day's unassigned counts from location schedules
- Read models: listings, availability and dashboard statistics

Every mutating call locks the StockCount row (select_for_update) inside a
transaction, so concurrent calls on one count run one after the other
while different counts never wait on each other.
"""
import logging
from decimal import Decimal, InvalidOperation
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count
from django.utils import timezone

from apps.items.models import Item
from apps.warehousing.models import Location, Bin
from apps.warehousing.services import (
    AdjustmentError, InventoryAdjustmentService, LocationDirectory,
)
from . import exceptions
from .models import (
    CountSchedule, StockCount, StockCountItem, StockCountStatus, TRANSITIONS, accuracy_percentage,
)

logger = logging.getLogger(__name__)

# attempts at a unique number when counts are created concurrently
NUMBER_ATTEMPTS = 5

DEFAULT_CONFIG = {
    'NUMBER_PREFIX': 'SC',
    'NUMBER_PADDING': 4,
    'DEFAULT_COUNT_TYPE': 'audit',
    'REQUIRE_ALL_LINES_COUNTED': False,
}


def get_config(key):
    """Read a STOCK_COUNTS setting, falling back to the default."""
    return getattr(settings, 'STOCK_COUNTS', {}).get(key, DEFAULT_CONFIG[key])


def adjustment_key(stock_count, line):
    """
    Idempotency key for the inventory adjustment of one count line.

    Recounts start a new review round with its own keys, so a recounted
    line is never mistaken for a replay of an earlier approval attempt.
    """
    key = f"stock-count:{stock_count.pk}:line:{line.pk}"
    if stock_count.review_round > 1:
        key = f"{key}:round:{stock_count.review_round}"
    return key


def reversal_key(stock_count, line):
    """Idempotency key for undoing a line's adjustment when the count is rejected."""
    return f"{adjustment_key(stock_count, line)}:reversal"


def display_name(user):
    if user is None:
        return ''
    return user.get_full_name() or user.get_username()


class StockCountService:
    """
    Service for the stock count workflow.

    Usage:
        service = StockCountService(user)

        count = service.create_count(
            location=location,
            items=[
                {'item': widget, 'expected_quantity': 10, 'bin': bin_a},
                {'item': gadget, 'expected_quantity': 5, 'bin': bin_a},
            ],
            assigned_to=counter,
        )
        service.start_count(count.pk)
        service.save_counts(count.pk, [(line1.pk, 10), (line2.pk, 3)])
        service.submit_count(count.pk)
        service.approve_count(count.pk, notes='Checked')
    """

    def __init__(self, user=None, adjustment_sink=None):
        """
        Args:
            user: User performing operations (assignor, approver)
            adjustment_sink: Object with apply_adjustment(); defaults to
                InventoryAdjustmentService
        """
        self.user = user
        self.adjustment_sink = adjustment_sink or InventoryAdjustmentService(user)
        self.directory = LocationDirectory()

    # ===== CREATION =====

    def _generate_count_number(self):
        """Generate next stock count number: SC-YYYY-NNNN."""
        prefix = f"{get_config('NUMBER_PREFIX')}-{timezone.now().year}-"
        # newest row, not the string maximum: SC-2026-10000 sorts before SC-2026-9999
        last = StockCount.objects.filter(
            stock_count_number__startswith=prefix,
        ).order_by('-id').first()
        if last:
            try:
                seq = int(last.stock_count_number.split('-')[-1]) + 1
            except ValueError:
                seq = 1
        else:
            seq = 1
        return f"{prefix}{seq:0{get_config('NUMBER_PADDING')}d}"

    def _save_with_number(self, count):
        """Insert count under the next free number, retrying on a collision."""
        for attempt in range(1, NUMBER_ATTEMPTS + 1):
            count.stock_count_number = self._generate_count_number()
            try:
                with transaction.atomic():
                    count.save()
                return
            except IntegrityError:
                if attempt == NUMBER_ATTEMPTS or not StockCount.objects.filter(
                    stock_count_number=count.stock_count_number,
                ).exists():
                    raise
                logger.warning(f'Stock count number {count.stock_count_number} taken, retrying')

    def create_count(
        self,
        location,
        items=(),
        assigned_to=None,
        count_type=None,
        due_date=None,
        notes='',
        bin=None,
        auto_generated=False,
    ):
        """
        Create a stock count in draft status.

        Args:
            location: Location instance or PK
            items: Iterable of dicts with 'item' (Item or PK),
                   'expected_quantity' and optional 'bin' (Bin or PK)
            assigned_to: Optional user who will do the counting
            count_type: 'audit' or 'delivery' (defaults to configuration)
            due_date: Optional date the count is due
            notes: Optional notes
            bin: Optional Bin restricting the count to one bin
            auto_generated: True for counts created by the scheduler

        Returns:
            StockCount instance

        Raises:
            NotFound: Unknown location, bin or item
            ValidationError: Negative expected quantity or bin outside location
        """
        location = self._get(Location, location)
        bin = self._get(Bin, bin) if bin is not None else None
        if bin is not None and bin.location_id != location.pk:
            raise exceptions.ValidationError(f"Bin {bin.code} is not in location {location.code}.")

        count_type = count_type or get_config('DEFAULT_COUNT_TYPE')
        if count_type not in dict(StockCount.COUNT_TYPE_CHOICES):
            raise exceptions.ValidationError(f"Unknown count type: {count_type}")

        with transaction.atomic():
            count = StockCount(
                location=location,
                location_name=location.name,
                bin=bin,
                bin_code=bin.code if bin else None,
                assigned_to=assigned_to,
                assigned_to_name=display_name(assigned_to),
                assigned_by=self.user,
                assigned_by_name=display_name(self.user),
                count_type=count_type,
                due_date=due_date,
                notes=notes or '',
                auto_generated=auto_generated,
                status=StockCountStatus.DRAFT,
            )
            lines = self._build_lines(count, items)
            self._save_with_number(count)
            for line in lines:
                line.stock_count = count
                line.save()

        logger.info(
            f'Stock count created: {count.stock_count_number}, location={location.code}, '
            f'items={len(lines)}'
        )
        return count

    def create_count_from_bin(self, bin, assigned_to=None, count_type=None, due_date=None, notes='', auto_generated=False):
        """
        Create a draft count for one bin, expecting its current stock.

        One line is created per item with positive stock in the bin.
        """
        bin = self._get(Bin, bin)
        items = [
            {'item': level.item, 'expected_quantity': level.quantity, 'bin': bin}
            for level in self.directory.get_bin_stock(bin.pk)
        ]
        return self.create_count(
            location=bin.location,
            items=items,
            assigned_to=assigned_to,
            count_type=count_type,
            due_date=due_date,
            notes=notes,
            bin=bin,
            auto_generated=auto_generated,
        )

    def add_items(self, stock_count, items):
        """Append lines to a draft count. Returns the new lines."""
        with transaction.atomic():
            count = self._lock(stock_count)
            self._check_transition(count, 'add_items')
            lines = self._build_lines(count, items)
            if not lines:
                raise exceptions.ValidationError("No items supplied.")
            for line in lines:
                line.save()

        logger.info(f'Stock count {count.stock_count_number}: {len(lines)} items added')
        return lines

    def generate_scheduled_counts(self, day=None):
        """
        Create the day's unassigned audit counts from location schedules.

        For every active schedule that falls on day, each active bin of the
        location that holds stock gets one auto-generated draft count due
        that day. Bins that already have a count due that day are skipped,
        so running this more than once for the same day is safe.

        Returns:
            dict: 'date', 'generated' (list of StockCount), 'skipped',
                  'empty' and 'errors'
        """
        day = day or timezone.localdate()
        result = {'date': day, 'generated': [], 'skipped': 0, 'empty': 0, 'errors': []}

        schedules = CountSchedule.objects.filter(
            is_active=True,
            location__is_active=True,
        ).select_related('location').prefetch_related('overrides')
        scheduled = [schedule for schedule in schedules if schedule.is_scheduled(day)]
        if not scheduled:
            logger.info(f'No locations scheduled for counting on {day}')
            return result

        for schedule in scheduled:
            location = schedule.location
            with transaction.atomic():
                # one generator per location at a time
                CountSchedule.objects.select_for_update().get(pk=schedule.pk)

                bins = list(location.bins.filter(is_active=True).order_by('code'))
                existing = set(
                    StockCount.objects.filter(bin__in=bins, due_date=day).values_list('bin_id', flat=True)
                )
                for bin in bins:
                    if bin.pk in existing:
                        result['skipped'] += 1
                        continue
                    if not self.directory.get_bin_stock(bin.pk).exists():
                        result['empty'] += 1
                        continue
                    try:
                        count = self.create_count_from_bin(
                            bin,
                            count_type='audit',
                            due_date=day,
                            notes='Auto-generated from schedule',
                            auto_generated=True,
                        )
                    except exceptions.StockCountError as e:
                        logger.warning(f'Scheduled count for bin {location.code}/{bin.code} failed: {e.message}')
                        result['errors'].append(f"{location.code}/{bin.code}: {e.message}")
                        continue
                    result['generated'].append(count)

        logger.info(
            f'Scheduled counts for {day}: generated={len(result["generated"])}, '
            f'skipped={result["skipped"]}, empty={result["empty"]}, errors={len(result["errors"])}'
        )
        return result

    def _build_lines(self, count, items):
        """Validate item specs and build unsaved StockCountItem rows."""
        lines = []
        for entry in items:
            item = self._get(Item, entry.get('item'))
            bin = entry.get('bin') or count.bin
            if bin is not None:
                bin = self._get(Bin, bin)
                if bin.location_id != count.location_id:
                    raise exceptions.ValidationError(
                        f"Bin {bin.code} is not in location {count.location_name}."
                    )
            expected = self._parse_quantity(entry.get('expected_quantity'), 'Expected quantity')
            lines.append(StockCountItem(
                stock_count=count,
                item=item,
                item_name=item.name,
                sku=item.sku,
                bin=bin,
                bin_code=bin.code if bin else None,
                expected_quantity=expected,
            ))
        return lines

    # ===== WORKFLOW =====

    def start_count(self, stock_count):
        """Transition from draft to in_progress."""
        with transaction.atomic():
            count = self._lock(stock_count)
            target = self._check_transition(count, 'start')
            if not count.items.exists():
                raise exceptions.ValidationError("Cannot start a stock count with no items.")

            count.status = target
            count.started_at = timezone.now()
            count.save(update_fields=['status', 'started_at', 'updated_at'])

        logger.info(f'Stock count started: {count.stock_count_number}')
        return count

    def claim_count(self, stock_count, user=None):
        """
        Claim an unassigned draft count and start it.

        Counters pick auto-generated counts from the day's available list.
        """
        user = user or self.user
        if user is None:
            raise exceptions.ValidationError("A counter is required to claim a stock count.")
        with transaction.atomic():
            count = self._lock(stock_count)
            target = self._check_transition(count, 'claim')
            if count.assigned_to_id and count.assigned_to_id != user.pk:
                raise exceptions.ValidationError(
                    f"Stock count {count.stock_count_number} is already claimed by another counter."
                )
            if not count.items.exists():
                raise exceptions.ValidationError("Cannot start a stock count with no items.")

            count.assigned_to = user
            count.assigned_to_name = display_name(user)
            count.status = target
            count.started_at = timezone.now()
            count.save(update_fields=[
                'assigned_to', 'assigned_to_name', 'status', 'started_at', 'updated_at',
            ])

        logger.info(f'Stock count claimed: {count.stock_count_number} by {count.assigned_to_name}')
        return count

    def save_counts(self, stock_count, entries):
        """
        Record counted quantities for several lines at once.

        Args:
            stock_count: StockCount instance or PK
            entries: Iterable of (line_id, counted_quantity) pairs or dicts
                     with 'line_id', 'counted_quantity' and optional 'notes'

        Returns:
            list of updated StockCountItem

        The batch is all-or-nothing: every entry is validated before any
        line is written. Lines not named keep their values.
        """
        with transaction.atomic():
            count = self._lock(stock_count)
            self._check_transition(count, 'save_counts')

            lines = {line.pk: line for line in count.items.all()}
            updates = []
            seen = set()
            for entry in entries:
                if isinstance(entry, dict):
                    line_id = entry.get('line_id')
                    quantity = entry.get('counted_quantity')
                    notes = entry.get('notes')
                else:
                    line_id, quantity = entry
                    notes = None

                try:
                    line_id = int(line_id)
                except (TypeError, ValueError):
                    raise exceptions.ValidationError(f"Invalid line id: {line_id}")
                if line_id not in lines:
                    raise exceptions.ValidationError(
                        f"Line {line_id} does not belong to stock count {count.stock_count_number}."
                    )
                if line_id in seen:
                    raise exceptions.ValidationError(f"Line {line_id} appears more than once.")
                seen.add(line_id)

                quantity = self._parse_quantity(quantity, 'Counted quantity')
                updates.append((lines[line_id], quantity, notes))

            if not updates:
                raise exceptions.ValidationError("No counts supplied.")

            now = timezone.now()
            for line, quantity, notes in updates:
                line.counted_quantity = quantity
                line.counted_at = now
                if notes is not None:
                    line.notes = notes
                line.save()
            count.save(update_fields=['updated_at'])

        logger.info(f'Stock count {count.stock_count_number}: saved {len(updates)} counts')
        return [line for line, _, _ in updates]

    def submit_count(self, stock_count):
        """
        Transition from in_progress to submitted.

        At least one line must be counted. Uncounted lines only produce a
        warning unless STOCK_COUNTS['REQUIRE_ALL_LINES_COUNTED'] is set.
        """
        with transaction.atomic():
            count = self._lock(stock_count)
            target = self._check_transition(count, 'submit')

            total = count.items.count()
            counted = count.items.filter(counted_quantity__isnull=False).count()
            if counted == 0:
                raise exceptions.ValidationError("Count at least one item before submitting.")
            uncounted = total - counted
            if uncounted:
                if get_config('REQUIRE_ALL_LINES_COUNTED'):
                    raise exceptions.ValidationError(f"{uncounted} items have not been counted yet.")
                logger.warning(
                    f'Stock count {count.stock_count_number} submitted with {uncounted} of {total} items uncounted'
                )

            count.status = target
            count.submitted_at = timezone.now()
            count.save(update_fields=['status', 'submitted_at', 'updated_at'])

        logger.info(f'Stock count submitted: {count.stock_count_number}')
        return count

    def approve_count(self, stock_count, notes=''):
        """
        Approve a submitted count and apply its variances to inventory.

        Every line with a non-zero variance is sent to the adjustment sink
        keyed by (count, line, review round). Only when all succeed is the
        count marked approved. Approving an already approved count returns
        it unchanged.

        Raises:
            InvalidTransition: Count is not submitted
            PartialAdjustmentFailure: An adjustment failed; count stays submitted
        """
        applied = []
        failure = None

        with transaction.atomic():
            count = self._lock(stock_count)
            if count.status == StockCountStatus.APPROVED:
                logger.info(f'Stock count {count.stock_count_number} already approved')
                return count
            target = self._check_transition(count, 'approve')

            lines = count.items.filter(variance__isnull=False).exclude(variance=0).order_by('id')
            reference = f"{count.stock_count_number} approval"
            for line in lines:
                try:
                    with transaction.atomic():
                        self.adjustment_sink.apply_adjustment(
                            item_id=line.item_id,
                            delta=line.variance,
                            idempotency_key=adjustment_key(count, line),
                            bin_id=line.bin_id,
                            location_id=count.location_id,
                            reference=reference,
                        )
                        StockCountItem.objects.filter(pk=line.pk).update(applied_delta=line.variance)
                except AdjustmentError as e:
                    failure = (line, '; '.join(e.messages))
                    break
                applied.append(line.pk)

            if failure is None:
                count.status = target
                count.approved_by = self.user
                count.approved_at = timezone.now()
                count.reviewed_by = self.user
                count.reviewed_by_name = display_name(self.user)
                count.notes = self._append_notes(count.notes, notes)
                count.save(update_fields=[
                    'status', 'approved_by', 'approved_at', 'reviewed_by', 'reviewed_by_name',
                    'notes', 'updated_at',
                ])

        if failure is not None:
            line, reason = failure
            logger.warning(
                f'Stock count {count.stock_count_number} approval stopped at line {line.pk}: {reason}'
            )
            raise exceptions.PartialAdjustmentFailure(
                f"Inventory adjustment failed for {line.sku or line.item_name}: {reason}",
                applied_line_ids=applied,
                failed_line_id=line.pk,
            )

        logger.info(
            f'Stock count approved: {count.stock_count_number}, adjustments={len(applied)}'
        )
        return count

    def reject_count(self, stock_count, notes=''):
        """
        Reject a submitted count, clearing every counted quantity.

        Adjustments posted by an approval that failed partway are reversed
        first, so inventory is back where it was before the review. If a
        reversal fails the count stays submitted with its counts intact;
        retrying the rejection replays the reversals already posted.

        Raises:
            InvalidTransition: Count is not submitted
            PartialAdjustmentFailure: A reversal failed
        """
        reversed_lines = []
        failure = None

        with transaction.atomic():
            count = self._lock(stock_count)
            target = self._check_transition(count, 'reject')

            reference = f"{count.stock_count_number} rejection"
            for line in count.items.filter(applied_delta__isnull=False).order_by('id'):
                try:
                    with transaction.atomic():
                        self.adjustment_sink.apply_adjustment(
                            item_id=line.item_id,
                            delta=-line.applied_delta,
                            idempotency_key=reversal_key(count, line),
                            bin_id=line.bin_id,
                            location_id=count.location_id,
                            reference=reference,
                        )
                        StockCountItem.objects.filter(pk=line.pk).update(applied_delta=None)
                except AdjustmentError as e:
                    failure = (line, '; '.join(e.messages))
                    break
                reversed_lines.append(line.pk)

            if failure is None:
                now = timezone.now()
                count.items.update(
                    counted_quantity=None,
                    variance=None,
                    status='pending',
                    counted_at=None,
                    updated_at=now,
                )
                count.status = target
                count.rejected_at = now
                count.reviewed_by = self.user
                count.reviewed_by_name = display_name(self.user)
                count.notes = self._append_notes(count.notes, notes)
                count.save(update_fields=[
                    'status', 'rejected_at', 'reviewed_by', 'reviewed_by_name', 'notes', 'updated_at',
                ])

        if failure is not None:
            line, reason = failure
            logger.warning(
                f'Stock count {count.stock_count_number} rejection could not reverse line {line.pk}: {reason}'
            )
            raise exceptions.PartialAdjustmentFailure(
                f"Could not reverse the adjustment for {line.sku or line.item_name}: {reason}",
                applied_line_ids=reversed_lines,
                failed_line_id=line.pk,
            )

        if reversed_lines:
            logger.info(
                f'Stock count {count.stock_count_number}: reversed {len(reversed_lines)} partial adjustments'
            )
        logger.info(f'Stock count rejected: {count.stock_count_number}')
        return count

    def recount(self, stock_count):
        """Send a rejected count back to in_progress under a new review round."""
        with transaction.atomic():
            count = self._lock(stock_count)
            target = self._check_transition(count, 'recount')
            count.status = target
            count.review_round += 1
            count.save(update_fields=['status', 'review_round', 'updated_at'])

        logger.info(
            f'Stock count reopened for recount: {count.stock_count_number}, round={count.review_round}'
        )
        return count

    def delete_count(self, stock_count):
        """Delete a count. Only drafts may be deleted."""
        with transaction.atomic():
            count = self._lock(stock_count)
            if count.status != StockCountStatus.DRAFT:
                raise exceptions.DeletionNotAllowed(
                    f"Stock count {count.stock_count_number} is {count.status}; only draft counts can be deleted."
                )
            number = count.stock_count_number
            count.delete()

        logger.info(f'Stock count deleted: {number}')

    # ===== QUERIES =====

    def list_counts(self, status=None, location=None, assigned_to=None, count_type=None):
        """List counts, newest first, with optional filters."""
        qs = StockCount.objects.select_related('location', 'bin', 'assigned_to')
        if status:
            qs = qs.filter(status=status)
        if location:
            qs = qs.filter(location=location)
        if assigned_to:
            qs = qs.filter(assigned_to=assigned_to)
        if count_type:
            qs = qs.filter(count_type=count_type)
        return qs

    def get_count(self, count_id):
        """Fetch a count with its items."""
        try:
            return StockCount.objects.select_related(
                'location', 'bin', 'assigned_to', 'approved_by',
            ).prefetch_related('items').get(pk=count_id)
        except (StockCount.DoesNotExist, ValueError, TypeError):
            raise exceptions.NotFound(f"Stock count {count_id} does not exist.")

    def list_available(self, day=None):
        """Unclaimed auto-generated draft counts due on day (default today)."""
        day = day or timezone.localdate()
        return StockCount.objects.filter(
            due_date=day,
            assigned_to__isnull=True,
            status=StockCountStatus.DRAFT,
            auto_generated=True,
        ).order_by('location_name', 'bin_code')

    def get_stats(self):
        """
        Dashboard statistics.

        Returns:
            dict: 'total', one key per status, and 'avg_accuracy' over
                  reviewed or submitted counts that have counted lines
        """
        stats = {'total': 0}
        stats.update({code: 0 for code, _ in StockCountStatus.CHOICES})
        rows = StockCount.objects.order_by().values('status').annotate(n=Count('id'))
        for row in rows:
            stats['total'] += row['n']
            stats[row['status']] = row['n']

        stats['avg_accuracy'] = self._average_accuracy(
            StockCount.objects.filter(status__in=[
                StockCountStatus.SUBMITTED, StockCountStatus.APPROVED, StockCountStatus.REJECTED,
            ])
        )
        return stats

    def get_counter_stats(self, user):
        """Performance summary for one counter."""
        counts = StockCount.objects.filter(assigned_to=user)
        by_status = {code: 0 for code, _ in StockCountStatus.CHOICES}
        for row in counts.order_by().values_list('status', flat=True):
            by_status[row] += 1

        completed = [StockCountStatus.APPROVED, StockCountStatus.REJECTED]
        return {
            'total_counts': sum(by_status.values()),
            'completed_counts': sum(by_status[s] for s in completed),
            'pending_counts': by_status[StockCountStatus.DRAFT] + by_status[StockCountStatus.IN_PROGRESS],
            'submitted_counts': by_status[StockCountStatus.SUBMITTED],
            'avg_accuracy': self._average_accuracy(counts.filter(status__in=completed)),
        }

    def _average_accuracy(self, queryset):
        accuracies = [
            accuracy_percentage(count.matched_items, count.counted_items)
            for count in queryset.with_line_stats()
            if count.counted_items
        ]
        if not accuracies:
            return Decimal('0.00')
        return (sum(accuracies) / len(accuracies)).quantize(Decimal('0.01'))

    # ===== HELPERS =====

    def _lock(self, stock_count):
        """Lock and return the StockCount row for the rest of the transaction."""
        pk = stock_count.pk if isinstance(stock_count, StockCount) else stock_count
        try:
            return StockCount.objects.select_for_update().get(pk=pk)
        except (StockCount.DoesNotExist, ValueError, TypeError):
            raise exceptions.NotFound(f"Stock count {pk} does not exist.")

    def _check_transition(self, count, trigger):
        """Return the target status of trigger, or raise InvalidTransition."""
        allowed_from, target = TRANSITIONS[trigger]
        if count.status not in allowed_from:
            raise exceptions.InvalidTransition(count.status, target, trigger)
        return target

    def _get(self, model, value):
        if isinstance(value, model):
            return value
        try:
            return model.objects.get(pk=value)
        except (model.DoesNotExist, ValueError, TypeError):
            raise exceptions.NotFound(f"{model._meta.verbose_name.title()} {value} does not exist.")

    def _parse_quantity(self, value, label):
        try:
            quantity = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise exceptions.ValidationError(f"{label} must be a number, got {value!r}.")
        if value is None or not quantity.is_finite():
            raise exceptions.ValidationError(f"{label} must be a number, got {value!r}.")
        if quantity < 0:
            raise exceptions.ValidationError(f"{label} cannot be negative ({quantity}).")
        return quantity

    def _append_notes(self, existing, notes):
        if not notes:
            return existing
        return f"{existing}\n{notes}" if existing else notes
