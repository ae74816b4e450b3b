# sp_FitReporter/core/transform.py
from __future__ import annotations
import numpy as np

from .errors import DomainError
from .model import APERTURES, RawRow, RawTable, LogRow, LogTable

KV_TO_EV: float = 1000.0
M2_PER_MG_TO_CM2_PER_G: float = 1e7   # 1 m2/mg = 1e4 cm2 / 1e-3 g

# (raw column, log column, factor)
_CONVERSIONS: tuple[tuple[str, str, float], ...] = (
    ("voltage_kV", "ln_voltage_eV", KV_TO_EV),
    *((ap.raw_column, ap.log_column, M2_PER_MG_TO_CM2_PER_G) for ap in APERTURES),
)

def _safe_log(values: np.ndarray, column: str) -> np.ndarray:
    bad = ~(values > 0)
    if bad.any():
        pos = int(np.flatnonzero(bad)[0])
        raise DomainError(
            f"cannot take ln of non-positive value {values[pos]!r} "
            f"in column '{column}' at row {pos + 1}"
        )
    return np.log(values)

def to_log_table(raw: RawTable) -> LogTable:
    """Convert kV -> eV and m2/mg -> cm2/g, then take natural logs column-wise."""
    cols = {}
    for raw_col, log_col, factor in _CONVERSIONS:
        cols[log_col] = _safe_log(raw.column(raw_col) * factor, raw_col)

    names = list(cols)
    rows = tuple(
        LogRow(**{n: float(cols[n][i]) for n in names})
        for i in range(len(raw))
    )
    return LogTable(rows=rows)

def from_log_table(logs: LogTable) -> RawTable:
    """Inverse of to_log_table (exp, then undo the unit factors)."""
    cols = {raw_col: np.exp(logs.column(log_col)) / factor
            for raw_col, log_col, factor in _CONVERSIONS}
    rows = tuple(
        RawRow(**{n: float(v[i]) for n, v in cols.items()})
        for i in range(len(logs))
    )
    return RawTable(rows=rows)
