# sp_FitReporter/core/fitting.py
from __future__ import annotations
import logging
import numpy as np

from .errors import InsufficientDataError
from .model import APERTURES, FitResult, LogTable, aperture_cfg

MIN_POINTS: int = 3   # n - 2 residual degrees of freedom must be positive

_LOG = logging.getLogger(__name__)

def ols_line(x: np.ndarray, y: np.ndarray) -> dict:
    """
    Closed-form simple linear regression y = a + b*x.
    Uses centered sums so the result does not depend on row order
    beyond floating-point summation.
    """
    x = np.asarray(x, float)
    y = np.asarray(y, float)
    n = x.size
    if n != y.size:
        raise ValueError(f"x/y length mismatch: {n} vs {y.size}")
    if n < MIN_POINTS:
        raise InsufficientDataError(f"need at least {MIN_POINTS} points for a fit, got {n}")

    x_bar = x.mean()
    y_bar = y.mean()
    dx = x - x_bar
    dy = y - y_bar
    sxx = float(np.dot(dx, dx))
    if sxx == 0.0:
        raise InsufficientDataError("all x values are identical; slope is undefined")

    slope = float(np.dot(dx, dy)) / sxx
    intercept = y_bar - slope * x_bar
    resid = y - (intercept + slope * x)
    sse = float(np.dot(resid, resid))
    s = np.sqrt(sse / (n - 2))
    syy = float(np.dot(dy, dy))
    return {
        "slope": float(slope),
        "slope_stderr": float(s / np.sqrt(sxx)),
        "intercept": float(intercept),
        "intercept_stderr": float(s * np.sqrt(1.0 / n + x_bar ** 2 / sxx)),
        "n": int(n),
        "residual_stderr": float(s),
        "r_squared": float(1.0 - sse / syy) if syy > 0 else 1.0,
    }

def fit_aperture(logs: LogTable, aperture_mrad: int) -> FitResult:
    """Fit ln(S_P) against ln(E0) for one aperture, using only that aperture's column."""
    ap = aperture_cfg(aperture_mrad)
    x = logs.column("ln_voltage_eV")
    y = logs.column(ap.log_column)
    try:
        res = ols_line(x, y)
    except InsufficientDataError as exc:
        raise InsufficientDataError(f"{ap.label}: {exc}", apertures=(ap.mrad,)) from exc

    fit = FitResult(
        aperture_mrad=ap.mrad,
        slope_mean=res["slope"],
        slope_stderr=res["slope_stderr"],
        intercept_mean=res["intercept"],
        intercept_stderr=res["intercept_stderr"],
        n_points=res["n"],
        residual_stderr=res["residual_stderr"],
        r_squared=res["r_squared"],
    )
    _LOG.debug("fit %s: slope=%.6f±%.6f intercept=%.6f±%.6f (n=%d, R2=%.5f)",
               ap.label, fit.slope_mean, fit.slope_stderr,
               fit.intercept_mean, fit.intercept_stderr, fit.n_points, fit.r_squared)
    return fit

def fit_all(logs: LogTable) -> tuple[FitResult, ...]:
    """
    Fit every aperture in ascending order.
    The observation count is checked once up front: a short table fails for
    all apertures together and no FitResult is produced.
    """
    n = len(logs)
    if n < MIN_POINTS:
        mrads = tuple(ap.mrad for ap in APERTURES)
        raise InsufficientDataError(
            f"need at least {MIN_POINTS} observations per aperture, got {n} "
            f"(apertures {', '.join(str(m) for m in mrads)} mrad)",
            apertures=mrads,
        )
    return tuple(fit_aperture(logs, ap.mrad) for ap in APERTURES)
