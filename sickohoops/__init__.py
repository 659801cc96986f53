"""SickoHoops - NBA quiz generation and answer matching."""

__version__ = "1.0.0"
