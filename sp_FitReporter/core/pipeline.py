# sp_FitReporter/core/pipeline.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import logging

from ..loaders import table_loader
from .errors import ConfigError
from .fitting import fit_all
from .model import FitResult, LogTable, PredictionCurve, RawTable, SummaryTable
from .plotting import DEFAULT_TITLE, save_fit_plot
from .predict import prepare_grid, predict
from .reports import DEFAULT_DECIMALS, build_summary, fits_frame, write_summary
from .transform import to_log_table

_LOG = logging.getLogger(__name__)

@dataclass(frozen=True)
class PipelineResult:
    raw: RawTable
    logs: LogTable
    fits: tuple[FitResult, ...]
    curves: tuple[PredictionCurve, ...]
    summary: SummaryTable
    plot_path: Path
    report_paths: tuple[Path, ...]

def run_pipeline(cfg: dict, data_path: Path, out_root: Path) -> PipelineResult:
    """
    load -> ln transform -> fit per aperture -> predict -> plot -> summary.
    Any SpFitError aborts the run; nothing is written before all fits succeed.
    """
    cfg = cfg or {}
    grid = prepare_grid(cfg)
    plot_cfg = cfg.get("plot", {}) or {}
    rep_cfg = cfg.get("reports", {}) or {}
    fmt = str(rep_cfg.get("format", "csv")).lower()
    mat_var = str(rep_cfg.get("mat_variable", "sp_fit"))
    try:
        decimals = int(rep_cfg.get("decimals", DEFAULT_DECIMALS))
        dpi = int(plot_cfg.get("dpi", 160))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"reports.decimals and plot.dpi must be integers ({exc})") from exc
    if fmt not in ("csv", "mat", "both"):
        raise ConfigError(f"reports.format must be csv, mat or both, got {fmt!r}")

    raw = table_loader.load(data_path, cfg)
    logs = to_log_table(raw)
    fits = fit_all(logs)
    curves = tuple(predict(f, grid) for f in fits)
    _LOG.info("fitted %d apertures on %d observations; grid %d points", len(fits), len(logs), len(curves[0]))

    out_root.mkdir(parents=True, exist_ok=True)
    plot_path = save_fit_plot(
        logs,
        list(zip(fits, curves)),
        out_root / str(plot_cfg.get("file_name", "sp_vs_voltage.png")),
        title=str(plot_cfg.get("title", DEFAULT_TITLE)),
        dpi=dpi,
    )

    summary = build_summary(fits, decimals=decimals)
    written = write_summary(summary, out_root / "summary", "coefficient summary",
                            fmt=fmt, mat_variable=mat_var)

    if bool(rep_cfg.get("export_fit_details", True)):
        detail_path = out_root / "fit_details.csv"
        fits_frame(fits).to_csv(detail_path, index=False)
        print(f"[OK] wrote fit details → {detail_path}")
        written.append(detail_path)

    return PipelineResult(
        raw=raw, logs=logs, fits=fits, curves=curves, summary=summary,
        plot_path=plot_path, report_paths=tuple(written),
    )
