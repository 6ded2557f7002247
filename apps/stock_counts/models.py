# apps/stock_counts/models.py
"""
Stock count models.

Models:
- StockCount: A counting session for a location (or a single bin)
- StockCountItem: One item (optionally at one bin) to be counted
- CountSchedule: Weekly days on which a location is counted bin by bin
- CountScheduleOverride: A single date forced on or off

Workflow:
    draft -> in_progress -> submitted -> approved
                                      -> rejected -> in_progress (recount)

The allowed transitions are declared once in TRANSITIONS and enforced by
StockCountService. Approved counts are final.
"""
from decimal import Decimal
from django.db import models
from django.conf import settings
from simple_history.models import HistoricalRecords
from shared.models import TimestampMixin


class StockCountStatus:
    """Stock count status constants - use these instead of strings."""
    DRAFT = 'draft'
    IN_PROGRESS = 'in_progress'
    SUBMITTED = 'submitted'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    CHOICES = [
        (DRAFT, 'Draft'),
        (IN_PROGRESS, 'In Progress'),
        (SUBMITTED, 'Submitted'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
    ]


# trigger -> (statuses it may be applied from, resulting status)
TRANSITIONS = {
    'add_items': ({StockCountStatus.DRAFT}, StockCountStatus.DRAFT),
    'start': ({StockCountStatus.DRAFT}, StockCountStatus.IN_PROGRESS),
    'claim': ({StockCountStatus.DRAFT}, StockCountStatus.IN_PROGRESS),
    'save_counts': ({StockCountStatus.IN_PROGRESS}, StockCountStatus.IN_PROGRESS),
    'submit': ({StockCountStatus.IN_PROGRESS}, StockCountStatus.SUBMITTED),
    'approve': ({StockCountStatus.SUBMITTED}, StockCountStatus.APPROVED),
    'reject': ({StockCountStatus.SUBMITTED}, StockCountStatus.REJECTED),
    'recount': ({StockCountStatus.REJECTED}, StockCountStatus.IN_PROGRESS),
}


class StockCountQuerySet(models.QuerySet):

    def with_line_stats(self):
        """Annotate total_items, counted_items and matched_items."""
        return self.annotate(
            total_items=models.Count('items'),
            counted_items=models.Count('items', filter=models.Q(items__counted_quantity__isnull=False)),
            matched_items=models.Count('items', filter=models.Q(items__variance=0)),
        )


class StockCount(TimestampMixin):
    """
    Physical count of stock at a location.

    Location, bin and assignee names are copied onto the count when it is
    created so the record still reads correctly if those are renamed later.
    """
    COUNT_TYPE_CHOICES = [
        ('delivery', 'Delivery'),
        ('audit', 'Audit'),
    ]

    stock_count_number = models.CharField(
        max_length=50,
        unique=True,
        help_text="Stock count number (e.g., SC-2026-0001)"
    )
    status = models.CharField(
        max_length=20,
        choices=StockCountStatus.CHOICES,
        default=StockCountStatus.DRAFT,
    )
    count_type = models.CharField(
        max_length=20,
        choices=COUNT_TYPE_CHOICES,
        default='audit',
        help_text="'delivery' checks received goods, 'audit' is a periodic check"
    )

    # Where
    location = models.ForeignKey(
        'warehousing.Location',
        on_delete=models.PROTECT,
        related_name='stock_counts',
        help_text="Location being counted"
    )
    location_name = models.CharField(max_length=255)
    bin = models.ForeignKey(
        'warehousing.Bin',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='stock_counts',
        help_text="Bin being counted (blank = whole location)"
    )
    bin_code = models.CharField(max_length=100, null=True, blank=True)

    # Who
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_stock_counts',
        help_text="Counter responsible for this count"
    )
    assigned_to_name = models.CharField(max_length=255, blank=True)
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_stock_counts',
    )
    assigned_by_name = models.CharField(max_length=255, blank=True)

    # Scheduling
    due_date = models.DateField(null=True, blank=True)
    auto_generated = models.BooleanField(
        default=False,
        help_text="Created by the daily scheduler; may be claimed by any counter"
    )

    # Review
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_stock_counts',
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_stock_counts',
        help_text="Last user to approve or reject this count"
    )
    reviewed_by_name = models.CharField(max_length=255, blank=True)
    review_round = models.PositiveIntegerField(
        default=1,
        help_text="Incremented on every recount; part of the adjustment keys"
    )
    notes = models.TextField(blank=True)

    # Lifecycle timestamps
    started_at = models.DateTimeField(null=True, blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)

    objects = StockCountQuerySet.as_manager()
    history = HistoricalRecords()

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status']),
            models.Index(fields=['assigned_to', 'status']),
            models.Index(fields=['location', 'status']),
            models.Index(fields=['due_date', 'status']),
        ]
        permissions = [
            ('approve_stockcount', 'Can approve or reject stock counts'),
        ]

    def __str__(self):
        return f"{self.stock_count_number} - {self.location_name} ({self.status})"

    @property
    def is_terminal(self):
        return self.status == StockCountStatus.APPROVED

    def summary(self):
        """
        Line statistics for this count.

        accuracy_percentage is matched lines over counted lines.
        """
        total = counted = matched = 0
        for line in self.items.all():
            total += 1
            if line.counted_quantity is not None:
                counted += 1
                if line.variance == 0:
                    matched += 1
        return {
            'total_items': total,
            'counted_items': counted,
            'matched_items': matched,
            'mismatched_items': counted - matched,
            'accuracy_percentage': accuracy_percentage(matched, counted),
        }


def accuracy_percentage(matched, counted):
    """Matched lines as a percentage of counted lines, 2 decimals."""
    if not counted:
        return Decimal('0.00')
    return (Decimal(matched) * 100 / Decimal(counted)).quantize(Decimal('0.01'))


class StockCountItem(TimestampMixin):
    """
    One line of a stock count.

    expected_quantity is the baseline when the count was created.
    counted_quantity is entered by the counter (null = not counted yet).
    variance and status are derived on save and never set directly.
    """
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('counted', 'Counted'),
        ('mismatch', 'Mismatch'),
    ]

    stock_count = models.ForeignKey(
        StockCount,
        on_delete=models.CASCADE,
        related_name='items',
    )
    item = models.ForeignKey(
        'items.Item',
        on_delete=models.PROTECT,
        related_name='stock_count_items',
    )
    item_name = models.CharField(max_length=255)
    sku = models.CharField(max_length=100, blank=True)
    bin = models.ForeignKey(
        'warehousing.Bin',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='stock_count_items',
    )
    bin_code = models.CharField(max_length=100, null=True, blank=True)
    expected_quantity = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        default=0,
        help_text="System quantity when the count was created"
    )
    counted_quantity = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="Quantity counted (blank = not counted yet)"
    )
    variance = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="counted - expected (positive = surplus, negative = shortage)"
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='pending',
    )
    counted_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    applied_delta = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="Adjustment posted to inventory for the current review round"
    )

    class Meta:
        ordering = ['id']
        indexes = [
            models.Index(fields=['stock_count', 'status']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(expected_quantity__gte=0),
                name='stock_count_item_expected_non_negative'
            ),
            models.CheckConstraint(
                condition=models.Q(counted_quantity__isnull=True) | models.Q(counted_quantity__gte=0),
                name='stock_count_item_counted_non_negative'
            ),
        ]

    def __str__(self):
        return f"{self.sku or self.item_name}: expected={self.expected_quantity}, counted={self.counted_quantity}"

    def save(self, *args, **kwargs):
        if self.counted_quantity is None:
            self.variance = None
            self.status = 'pending'
        else:
            self.variance = self.counted_quantity - self.expected_quantity
            self.status = 'counted' if self.variance == 0 else 'mismatch'
        super().save(*args, **kwargs)


class CountSchedule(TimestampMixin):
    """
    Weekly counting schedule for a location.

    On a scheduled day every active bin of the location gets an unassigned
    audit count that any counter may claim. Overrides force or skip single
    dates (holidays are overrides with skip set).
    """
    WEEKDAY_FIELDS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')

    location = models.OneToOneField(
        'warehousing.Location',
        on_delete=models.CASCADE,
        related_name='count_schedule',
    )
    monday = models.BooleanField(default=False)
    tuesday = models.BooleanField(default=False)
    wednesday = models.BooleanField(default=False)
    thursday = models.BooleanField(default=False)
    friday = models.BooleanField(default=False)
    saturday = models.BooleanField(default=False)
    sunday = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['location__code']

    def __str__(self):
        days = [name[:3].title() for name in self.WEEKDAY_FIELDS if getattr(self, name)]
        return f"{self.location} ({', '.join(days) or 'no days'})"

    def is_scheduled(self, day):
        """True if counts should be generated for this location on day."""
        for override in self.overrides.all():
            if override.date == day:
                return not override.skip
        return getattr(self, self.WEEKDAY_FIELDS[day.weekday()])


class CountScheduleOverride(TimestampMixin):
    """Forces (skip=False) or cancels (skip=True) counting on one date."""
    schedule = models.ForeignKey(
        CountSchedule,
        on_delete=models.CASCADE,
        related_name='overrides',
    )
    date = models.DateField()
    skip = models.BooleanField(
        default=True,
        help_text="Skip counting on this date (holiday); untick to force a count"
    )
    reason = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ['date']
        unique_together = [('schedule', 'date')]

    def __str__(self):
        return f"{self.schedule.location} {self.date}: {'skip' if self.skip else 'count'}"
