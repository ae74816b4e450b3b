# sp_FitReporter/loaders/table_loader.py
from __future__ import annotations
from pathlib import Path
import logging
import numpy as np
import pandas as pd

from ..core.errors import LoadError
from ..core.model import RAW_COLUMNS, RawRow, RawTable

_LOG = logging.getLogger(__name__)

# ---------- cell normalization ----------
def _to_float(s: pd.Series, sep: str) -> pd.Series:
    txt = s.str.strip()
    if sep != ",":
        # tables exported with a decimal comma
        txt = txt.str.replace(",", ".", regex=False)
    return pd.to_numeric(txt, errors="coerce").astype(float)

def _read_frame(path: Path, sep: str) -> pd.DataFrame:
    if not path.exists():
        raise LoadError(f"input table not found: {path}")
    if not path.is_file():
        raise LoadError(f"input path is not a file: {path}")
    try:
        # header row read as data so its field count bounds every row
        df_all = pd.read_csv(path, sep=sep, header=None, index_col=False, dtype=str,
                             skipinitialspace=True, keep_default_na=False, na_values=[""])
    except pd.errors.EmptyDataError as exc:
        raise LoadError(f"{path.name}: file is empty") from exc
    except pd.errors.ParserError as exc:
        raise LoadError(f"{path.name}: malformed table ({exc})") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"{path.name}: cannot read file ({exc})") from exc

    df_raw = df_all.iloc[1:].reset_index(drop=True)
    df_raw.columns = ["" if pd.isna(c) else str(c).strip() for c in df_all.iloc[0]]
    return df_raw

def _df_from_table(path: Path, sep: str = ",") -> pd.DataFrame:
    df_raw = _read_frame(path, sep)
    if df_raw.shape[1] != len(RAW_COLUMNS):
        raise LoadError(
            f"{path.name}: expected {len(RAW_COLUMNS)} columns "
            f"({', '.join(RAW_COLUMNS)}), found {df_raw.shape[1]}: {list(df_raw.columns)}"
        )
    if df_raw.empty:
        raise LoadError(f"{path.name}: header present but no data rows")

    # fixed order; header text is informative only
    header = [str(c).strip() for c in df_raw.columns]
    out = pd.DataFrame(index=df_raw.index)
    for i, canon in enumerate(RAW_COLUMNS):
        col = df_raw.iloc[:, i]
        values = _to_float(col, sep)
        bad = values.isna() | ~np.isfinite(values.fillna(0.0))
        if bad.any():
            pos = int(np.flatnonzero(bad.to_numpy())[0])
            cell = col.iloc[pos]
            shown = "<empty>" if pd.isna(cell) else repr(cell)
            raise LoadError(f"{path.name}: non-numeric value {shown} in column '{canon}' at data row {pos + 1}")
        out[canon] = values

    if list(header) != list(RAW_COLUMNS):
        _LOG.debug("header %s mapped positionally to %s", header, list(RAW_COLUMNS))
    return out.reset_index(drop=True)


# ---------- public loader ----------
def load(path: Path, cfg: dict | None = None) -> RawTable:
    """
    Read the fixed-schema cross-section table.
    Columns (by position): voltage [kV], S_P at 5/10/15 mrad [m2/mg].
    Returns an immutable RawTable; raises LoadError on any schema problem.
    """
    path = Path(path)
    sep = str(((cfg or {}).get("input", {}) or {}).get("sep", ","))
    df = _df_from_table(path, sep=sep)

    volts = df["voltage_kV"].to_numpy()
    if volts.size > 1 and not np.all(np.diff(volts) > 0):
        _LOG.warning("%s: voltage column is not strictly increasing", path.name)

    rows = tuple(
        RawRow(**{c: float(v) for c, v in zip(RAW_COLUMNS, rec)})
        for rec in df[list(RAW_COLUMNS)].itertuples(index=False, name=None)
    )
    _LOG.info("loaded %d rows from %s", len(rows), path)
    return RawTable(rows=rows, source_path=path.resolve())
