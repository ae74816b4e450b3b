# sp_FitReporter/core/predict.py
from __future__ import annotations
from dataclasses import dataclass
import math
import numpy as np

from .errors import ConfigError
from .model import FitResult, PredictionCurve

# ln(E0 [eV]) range of interest, roughly 20 kV .. 110 kV
DEFAULT_X_MIN: float = 9.90
DEFAULT_X_MAX: float = 11.6
DEFAULT_STEP: float = 0.01

_COUNT_TOL: float = 1e-9

@dataclass(frozen=True)
class GridCfg:
    x_min: float = DEFAULT_X_MIN
    x_max: float = DEFAULT_X_MAX
    step: float = DEFAULT_STEP

def prepare_grid(global_cfg: dict | None) -> GridCfg:
    """Read the prediction section from config; missing keys fall back to defaults."""
    pred = (global_cfg or {}).get("prediction", {}) or {}
    try:
        grid = GridCfg(
            x_min=float(pred.get("x_min", DEFAULT_X_MIN)),
            x_max=float(pred.get("x_max", DEFAULT_X_MAX)),
            step=float(pred.get("step", DEFAULT_STEP)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"prediction grid values must be numbers ({exc})") from exc
    _check_grid(grid)
    return grid

def _check_grid(grid: GridCfg) -> None:
    if not (math.isfinite(grid.x_min) and math.isfinite(grid.x_max) and math.isfinite(grid.step)):
        raise ConfigError(f"prediction grid must be finite: {grid}")
    if grid.step <= 0:
        raise ConfigError(f"prediction step must be positive, got {grid.step}")
    if grid.x_max < grid.x_min:
        raise ConfigError(f"prediction x_max ({grid.x_max}) is below x_min ({grid.x_min})")

def grid_points(grid: GridCfg) -> np.ndarray:
    """
    x_i = x_min + i*step for i in 0..N-1, N = floor((x_max - x_min)/step) + 1.
    The quotient gets a small tolerance so 9.90..11.6 by 0.01 yields 171 points;
    the last point never exceeds x_max.
    """
    _check_grid(grid)
    n = math.floor((grid.x_max - grid.x_min) / grid.step + _COUNT_TOL) + 1
    x = grid.x_min + np.arange(n, dtype=float) * grid.step
    x[-1] = min(x[-1], grid.x_max)
    return x

def predict(fit: FitResult, grid: GridCfg | None = None) -> PredictionCurve:
    x = grid_points(grid or GridCfg())
    y = fit.intercept_mean + fit.slope_mean * x
    x.setflags(write=False)
    y.setflags(write=False)
    return PredictionCurve(aperture_mrad=fit.aperture_mrad, x=x, y=y)
