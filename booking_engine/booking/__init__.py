from booking_engine.booking.service import BookingService, InvalidStatusTransitionError

__all__ = ["BookingService", "InvalidStatusTransitionError"]
