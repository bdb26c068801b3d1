"""Decoders and checkers for SMC key values, RTC memory, NVRAM records and SMC firmware images."""

__version__ = "1.0.0"

__all__ = ["efistatus", "firmware", "rtc", "smcread", "smcvalue", "updatefile"]