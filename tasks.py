from celery import shared_task

from services.side_effects import run_booking_side_effects


@shared_task(ignore_result=True)
def booking_confirmed_task(booking_id: int):
    """Admin notification + confirmation email for a freshly confirmed booking."""
    return run_booking_side_effects(booking_id)
