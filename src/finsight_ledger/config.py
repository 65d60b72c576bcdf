# FinSight Ledger - Financial statements & consolidation engine for SMB portfolios
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for FinSight Ledger.

This module is responsible for:
- loading the engine configuration from a TOML file,
- exposing the typed, immutable EngineConfig used by the calculator,
  the period sequencer and the consolidator.

The configuration is always passed explicitly to the computation functions.
No configuration is cached at module level: two calls with the same inputs
and the same EngineConfig always produce the same results.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

GRANULARITIES: tuple[str, ...] = ("month", "quarter", "year")


@dataclass(frozen=True)
class EngineConfig:
    """
    Engine-wide configuration for FinSight Ledger.

    Attributes
    ----------
    balance_tolerance :
        Maximum absolute difference (in currency units) tolerated between
        total assets and total liabilities + equity, and between the
        balance sheet cash and the cash flow ending cash.
    default_granularity :
        Period size used by the period sequencer when the caller does not
        request one ('month', 'quarter' or 'year').
    intercompany_marker :
        Case-insensitive keyword identifying intercompany transactions
        (searched in the category and the description).
    currency :
        Presentation currency, only used by the view helpers.
    """

    balance_tolerance: float = 0.01
    default_granularity: str = "month"
    intercompany_marker: str = "intercompany"
    currency: str = "USD"


DEFAULT_CONFIG = EngineConfig()


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a TOML table by name, or an empty mapping if absent/invalid."""
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def parse_engine_config(raw: Mapping[str, Any]) -> EngineConfig:
    """
    Build an EngineConfig from already-parsed TOML data.

    Missing keys fall back to the defaults of EngineConfig.

    Raises:
        ValueError: if a value has the wrong type or is out of range.
    """
    engine_section = _section(raw, "engine")
    consolidation_section = _section(raw, "consolidation")

    raw_tolerance = engine_section.get(
        "balance_tolerance", DEFAULT_CONFIG.balance_tolerance
    )
    try:
        tolerance = float(raw_tolerance)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'engine.balance_tolerance' in the configuration. "
            "Expected a number."
        ) from exc
    if tolerance <= 0:
        raise ValueError("'engine.balance_tolerance' must be strictly positive.")

    granularity = str(
        engine_section.get("default_granularity", DEFAULT_CONFIG.default_granularity)
    ).strip().lower()
    if granularity not in GRANULARITIES:
        raise ValueError(
            f"Unknown 'engine.default_granularity': {granularity!r}. "
            f"Expected one of: {', '.join(GRANULARITIES)}."
        )

    currency = str(engine_section.get("currency") or DEFAULT_CONFIG.currency)

    marker = str(
        consolidation_section.get(
            "intercompany_marker", DEFAULT_CONFIG.intercompany_marker
        )
    ).strip().lower()
    if not marker:
        raise ValueError("'consolidation.intercompany_marker' cannot be empty.")

    return EngineConfig(
        balance_tolerance=tolerance,
        default_granularity=granularity,
        intercompany_marker=marker,
        currency=currency,
    )


def load_engine_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load the FinSight Ledger engine configuration from a TOML file.

    Expected sections in the TOML file
    ----------------------------------
    [engine]
        balance_tolerance   = 0.01
        default_granularity = "month"   # month | quarter | year
        currency            = "USD"

    [consolidation]
        intercompany_marker = "intercompany"

    When ``config_path`` is None, ``finsight_ledger.toml`` in the current
    working directory is used if it exists; otherwise the defaults are
    returned. An explicitly requested file must exist.

    Parameters
    ----------
    config_path :
        Optional path to the TOML configuration file.

    Returns
    -------
    EngineConfig
        Parsed and validated engine configuration.
    """
    if config_path is None:
        config_file = Path("finsight_ledger.toml").resolve()
        if not config_file.is_file():
            return DEFAULT_CONFIG
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    return parse_engine_config(raw)
