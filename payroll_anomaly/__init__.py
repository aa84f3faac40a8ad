"""Motor de detección de anomalías en fichajes (timecards) para nómina."""

__version__ = "0.1.0"
