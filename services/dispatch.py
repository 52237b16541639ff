from flask import current_app

from tasks import booking_confirmed_task


def dispatch_booking_confirmed(booking_id: int) -> bool:
    """Queue the post-confirmation side effects. Never raises."""
    try:
        booking_confirmed_task.delay(booking_id)
    except Exception:
        # broker down or misconfigured; the booking itself is already committed
        current_app.logger.exception("Could not queue side effects for booking %s", booking_id)
        return False
    return True
