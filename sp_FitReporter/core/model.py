# sp_FitReporter/core/model.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import numpy as np
import pandas as pd

RAW_COLUMNS: tuple[str, ...] = ("voltage_kV", "sp_5mrad", "sp_10mrad", "sp_15mrad")
LOG_COLUMNS: tuple[str, ...] = ("ln_voltage_eV", "ln_sp_5", "ln_sp_10", "ln_sp_15")

@dataclass(frozen=True)
class ApertureCfg:
    mrad: int            # objective aperture half-angle
    raw_column: str      # column in RawTable [m2/mg]
    log_column: str      # column in LogTable, ln([cm2/g])
    color: str
    label: str

APERTURES: tuple[ApertureCfg, ...] = (
    ApertureCfg(5,  "sp_5mrad",  "ln_sp_5",  "tab:red",   "5 mrad"),
    ApertureCfg(10, "sp_10mrad", "ln_sp_10", "tab:blue",  "10 mrad"),
    ApertureCfg(15, "sp_15mrad", "ln_sp_15", "tab:green", "15 mrad"),
)

def aperture_cfg(mrad: int) -> ApertureCfg:
    for ap in APERTURES:
        if ap.mrad == mrad:
            return ap
    raise ValueError(f"unknown aperture {mrad!r} mrad (expected one of {[a.mrad for a in APERTURES]})")


@dataclass(frozen=True)
class RawRow:
    voltage_kV: float
    sp_5mrad: float      # m2/mg
    sp_10mrad: float
    sp_15mrad: float

@dataclass(frozen=True)
class RawTable:
    rows: tuple[RawRow, ...]
    source_path: Path | None = None

    def __len__(self) -> int:
        return len(self.rows)

    def column(self, name: str) -> np.ndarray:
        if name not in RAW_COLUMNS:
            raise KeyError(name)
        return np.array([getattr(r, name) for r in self.rows], dtype=float)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({c: self.column(c) for c in RAW_COLUMNS})


@dataclass(frozen=True)
class LogRow:
    ln_voltage_eV: float
    ln_sp_5: float
    ln_sp_10: float
    ln_sp_15: float

    def ln_sp(self, mrad: int) -> float:
        return getattr(self, aperture_cfg(mrad).log_column)

@dataclass(frozen=True)
class LogTable:
    rows: tuple[LogRow, ...]

    def __len__(self) -> int:
        return len(self.rows)

    def column(self, name: str) -> np.ndarray:
        if name not in LOG_COLUMNS:
            raise KeyError(name)
        return np.array([getattr(r, name) for r in self.rows], dtype=float)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({c: self.column(c) for c in LOG_COLUMNS})


@dataclass(frozen=True)
class FitResult:
    aperture_mrad: int
    slope_mean: float
    slope_stderr: float
    intercept_mean: float
    intercept_stderr: float
    # diagnostics, not part of the summary table
    n_points: int = 0
    residual_stderr: float = float("nan")
    r_squared: float = float("nan")

@dataclass(frozen=True, eq=False)
class PredictionCurve:
    aperture_mrad: int
    x: np.ndarray = field(repr=False)
    y: np.ndarray = field(repr=False)

    def __eq__(self, other):
        if not isinstance(other, PredictionCurve):
            return NotImplemented
        return (self.aperture_mrad == other.aperture_mrad
                and np.array_equal(self.x, other.x)
                and np.array_equal(self.y, other.y))

    __hash__ = None

    def __len__(self) -> int:
        return len(self.x)

    def points(self) -> list[tuple[float, float]]:
        return [(float(a), float(b)) for a, b in zip(self.x, self.y)]


SUMMARY_COLUMNS: tuple[str, ...] = (
    "aperture_mrad", "slope_mean", "slope_stderr", "intercept_mean", "intercept_stderr",
)

@dataclass(frozen=True)
class SummaryRow:
    aperture_mrad: int
    slope_mean: float
    slope_stderr: float
    intercept_mean: float
    intercept_stderr: float

@dataclass(frozen=True)
class SummaryTable:
    rows: tuple[SummaryRow, ...]

    def __len__(self) -> int:
        return len(self.rows)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([[getattr(r, c) for c in SUMMARY_COLUMNS] for r in self.rows],
                            columns=list(SUMMARY_COLUMNS))
