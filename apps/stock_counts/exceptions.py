# apps/stock_counts/exceptions.py
"""
Errors raised by the stock count workflow.

Every error is raised before any row is written (PartialAdjustmentFailure
excepted, see below) so a failed call leaves the count as it was.
"""
from rest_framework import status


class StockCountError(Exception):
    """Base class for stock count errors."""
    code = 'stock_count_error'
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'detail': self.message, 'code': self.code}


class InvalidTransition(StockCountError):
    """The requested status change is not allowed from the current status."""
    code = 'invalid_transition'
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current_status, target_status, trigger):
        super().__init__(
            f"Cannot {trigger.replace('_', ' ')} a stock count with status "
            f"'{current_status}' (target status '{target_status}')."
        )
        self.current_status = current_status
        self.target_status = target_status
        self.trigger = trigger

    def to_dict(self):
        data = super().to_dict()
        data.update({
            'current_status': self.current_status,
            'target_status': self.target_status,
        })
        return data


class ValidationError(StockCountError):
    """Malformed input: negative quantity, unknown line, empty count, ..."""
    code = 'validation_error'


class DeletionNotAllowed(StockCountError):
    """Counts can only be deleted while in draft."""
    code = 'deletion_not_allowed'
    status_code = status.HTTP_409_CONFLICT


class PartialAdjustmentFailure(StockCountError):
    """
    Approval stopped because an inventory adjustment failed.

    Adjustments for applied_line_ids were written and are keyed, so
    retrying the approval will not apply them twice. The count stays
    submitted.
    """
    code = 'partial_adjustment_failure'
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message, applied_line_ids, failed_line_id):
        super().__init__(message)
        self.applied_line_ids = list(applied_line_ids)
        self.failed_line_id = failed_line_id

    def to_dict(self):
        data = super().to_dict()
        data.update({
            'applied_line_ids': self.applied_line_ids,
            'failed_line_id': self.failed_line_id,
        })
        return data


class NotFound(StockCountError):
    """A referenced count, line, item, location or bin does not exist."""
    code = 'not_found'
    status_code = status.HTTP_404_NOT_FOUND
