"""
Booking services.

- BookingIntentService: Create bookings (credit or checkout) and bundle checkouts
- BookingConfirmationService: Confirm bookings once their checkout is paid
- CreditLedger: Grant and consume prepaid credits
- ReminderService: Session reminder sweeps
- AchievementService: XP awards after confirmed bookings
"""

from .achievements import AchievementService
from .confirmation import BookingConfirmationService
from .credits import CreditLedger
from .intents import BookingIntent, BookingIntentService, BundleIntent
from .reminders import ReminderService

__all__ = [
    "AchievementService",
    "BookingConfirmationService",
    "BookingIntent",
    "BookingIntentService",
    "BundleIntent",
    "CreditLedger",
    "ReminderService",
]
