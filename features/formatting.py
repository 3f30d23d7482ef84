"""Display formatting for currency, energy and carbon figures."""

from __future__ import annotations

from typing import Optional


def format_usd(value: Optional[float], *, decimals: int = 2) -> str:
    """Format ``value`` as US dollars with thousands separators."""

    if value is None:
        return "-"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(float(value)):,.{decimals}f}"


def format_kwh(value: Optional[float], *, decimals: int = 4) -> str:
    if value is None:
        return "-"
    return f"{float(value):,.{decimals}f} kWh"


def format_kw(value: Optional[float], *, decimals: int = 1) -> str:
    if value is None:
        return "-"
    return f"{float(value):,.{decimals}f} kW"


def format_carbon(value: Optional[float], *, decimals: int = 3) -> str:
    """Format a mass in kilograms of CO2-equivalent, switching to tonnes above 10 t."""

    if value is None:
        return "-"
    kg = float(value)
    if abs(kg) >= 10_000:
        return f"{kg / 1000.0:,.2f} t CO₂e"
    return f"{kg:,.{decimals}f} kg CO₂e"


def format_rate(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"${float(value):.2f}/kWh"


__all__ = ["format_carbon", "format_kw", "format_kwh", "format_rate", "format_usd"]
