"""Models module exporting all database models."""

from .booking import Booking
from .class_definition import ClassDefinition
from .instructor import Instructor
from .scheduled_class import ScheduledClass, ScheduledClassStatus
from .waiting_list import WaitingListEntry

__all__ = [
    # Catalog entities
    "ClassDefinition",
    "Instructor",

    # Schedule entity
    "ScheduledClass",
    "ScheduledClassStatus",

    # Lifecycle entities
    "Booking",
    "WaitingListEntry",
]
