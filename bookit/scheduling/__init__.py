from bookit.scheduling.availability import AvailabilityQuery, get_available_slots
from bookit.scheduling.overlap import filter_available_slots, intervals_overlap, is_slot_available
from bookit.scheduling.reminders import ReminderScheduler
from bookit.scheduling.resolver import WorkingWindow, resolve_working_windows
from bookit.scheduling.slots import generate_time_slots
from bookit.scheduling.transitions import BookingTransitionGuard

__all__ = [
    "AvailabilityQuery", "get_available_slots",
    "filter_available_slots", "intervals_overlap", "is_slot_available",
    "ReminderScheduler",
    "WorkingWindow", "resolve_working_windows",
    "generate_time_slots",
    "BookingTransitionGuard",
]
