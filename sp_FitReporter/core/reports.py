# sp_FitReporter/core/reports.py
from __future__ import annotations
from pathlib import Path
from typing import Iterable, Literal
import pandas as pd
from scipy.io import savemat

from .errors import ConfigError
from .model import SUMMARY_COLUMNS, FitResult, SummaryRow, SummaryTable

ReportFormat = Literal["csv", "mat", "both"]

DEFAULT_DECIMALS: int = 4

def build_summary(fits: Iterable[FitResult], decimals: int = DEFAULT_DECIMALS) -> SummaryTable:
    """
    One row per aperture, ascending aperture, coefficients rounded to `decimals`.
    Rounding is Python's built-in round(): correctly rounded, ties to even
    on the stored binary value.
    """
    fits = list(fits)
    seen: set[int] = set()
    for f in fits:
        if f.aperture_mrad in seen:
            raise ValueError(f"duplicate fit for aperture {f.aperture_mrad} mrad")
        seen.add(f.aperture_mrad)

    rows = tuple(
        SummaryRow(
            aperture_mrad=int(f.aperture_mrad),
            slope_mean=round(float(f.slope_mean), decimals),
            slope_stderr=round(float(f.slope_stderr), decimals),
            intercept_mean=round(float(f.intercept_mean), decimals),
            intercept_stderr=round(float(f.intercept_stderr), decimals),
        )
        for f in sorted(fits, key=lambda f: f.aperture_mrad)
    )
    return SummaryTable(rows=rows)

def format_summary(table: SummaryTable, decimals: int = DEFAULT_DECIMALS) -> str:
    df = table.to_frame()
    return df.to_string(index=False, float_format=lambda v: f"{v:.{decimals}f}")

def _write_csv(df_out: pd.DataFrame, out_csv: Path, title: str) -> None:
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    df_out.to_csv(out_csv, index=False, encoding="utf-8")
    print(f"[OK] wrote report: {title} → {out_csv}")

def _write_mat(df_out: pd.DataFrame, out_mat: Path, varname: str, title: str) -> None:
    """
    Save a MATLAB struct with fields matching the CSV columns (each Nx1 double).
    """
    out_mat.parent.mkdir(parents=True, exist_ok=True)
    mat_struct = {
        name: df_out[name].to_numpy(dtype=float).reshape(-1, 1)
        for name in SUMMARY_COLUMNS
    }
    savemat(out_mat, {varname: mat_struct})
    print(f"[OK] wrote report: {title} → {out_mat}")

def write_summary(table: SummaryTable,
                  out_base: Path,
                  title: str = "coefficient summary",
                  fmt: ReportFormat = "csv",
                  mat_variable: str = "sp_fit") -> list[Path]:
    """
    Write the summary table.
    - out_base is a *base path without extension* (e.g., .../summary)
    - fmt: "csv" | "mat" | "both"
    Returns the written paths.
    """
    if fmt not in ("csv", "mat", "both"):
        raise ConfigError(f"unknown report format {fmt!r} (expected csv, mat or both)")
    if not len(table):
        return []
    df_out = table.to_frame()
    written: list[Path] = []
    if fmt in ("csv", "both"):
        path = out_base.with_suffix(".csv")
        _write_csv(df_out, path, title)
        written.append(path)
    if fmt in ("mat", "both"):
        path = out_base.with_suffix(".mat")
        _write_mat(df_out, path, mat_variable, title)
        written.append(path)
    return written

def fits_frame(fits: Iterable[FitResult]) -> pd.DataFrame:
    """Unrounded per-aperture diagnostics, for the detailed CSV."""
    rows = [{
        "aperture_mrad": f.aperture_mrad,
        "slope_mean": f.slope_mean,
        "slope_stderr": f.slope_stderr,
        "intercept_mean": f.intercept_mean,
        "intercept_stderr": f.intercept_stderr,
        "n_points": f.n_points,
        "residual_stderr": f.residual_stderr,
        "r_squared": f.r_squared,
    } for f in sorted(fits, key=lambda f: f.aperture_mrad)]
    return pd.DataFrame(rows, columns=[
        "aperture_mrad", "slope_mean", "slope_stderr", "intercept_mean",
        "intercept_stderr", "n_points", "residual_stderr", "r_squared",
    ])
