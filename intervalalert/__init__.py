"""IntervalAlert — countdown timer with escalating interval alerts."""

__version__ = "0.1.0"
