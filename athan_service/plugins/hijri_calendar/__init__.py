from .service import HijriCalendarSynchronizer, HijriMonthBoundary

__all__ = ["HijriCalendarSynchronizer", "HijriMonthBoundary"]
