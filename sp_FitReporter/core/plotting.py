# sp_FitReporter/core/plotting.py
from __future__ import annotations
from pathlib import Path
from typing import Sequence
import matplotlib.pyplot as plt

from .model import FitResult, LogTable, PredictionCurve, aperture_cfg

X_LABEL = "ln(E0 [eV])"
Y_LABEL = "ln(Sp [cm2/g])"
DEFAULT_TITLE = "Plural scattering cross section vs accelerating voltage"

def save_fit_plot(logs: LogTable,
                  fitted: Sequence[tuple[FitResult, PredictionCurve]],
                  out_path: Path,
                  title: str = DEFAULT_TITLE,
                  dpi: int = 160,
                  close: bool = True) -> Path:
    """
    Overlay, per aperture, the observed (ln E0, ln Sp) points and the fitted line.
    One fixed color per aperture; the legend carries the fitted slope.
    With close=False the figure stays current (plt.gcf()) after saving.
    """
    if not fitted:
        raise ValueError("nothing to plot: no fitted apertures")
    out_path.parent.mkdir(parents=True, exist_ok=True)

    for fit, curve in fitted:
        if curve.aperture_mrad != fit.aperture_mrad:
            raise ValueError(f"curve for {curve.aperture_mrad} mrad paired with fit for {fit.aperture_mrad} mrad")

    x_obs = logs.column("ln_voltage_eV")
    plt.figure(figsize=(8, 6))
    for fit, curve in fitted:
        ap = aperture_cfg(fit.aperture_mrad)
        plt.scatter(x_obs, logs.column(ap.log_column), color=ap.color, s=25,
                    label=f"{ap.label} data")
        plt.plot(curve.x, curve.y, color=ap.color, linewidth=1.5,
                 label=f"{ap.label} fit (slope {fit.slope_mean:.3f})")

    plt.xlabel(X_LABEL)
    plt.ylabel(Y_LABEL)
    plt.title(title, loc="center")
    plt.grid(True, alpha=0.3)
    plt.legend(fontsize=8, frameon=False)
    plt.tight_layout()
    plt.savefig(out_path, dpi=dpi)
    if close:
        plt.close()
    print(f"[OK] {len(fitted)} aperture fit(s) → {out_path}")
    return out_path
