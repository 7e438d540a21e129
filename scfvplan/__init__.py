"""SCFV Plan - budget planning and payroll cost projection for SCFV projects."""

__version__ = "0.3.0"
