# sp_FitReporter/main.py
from __future__ import annotations
from pathlib import Path
import logging
import sys
import yaml

from .core.errors import ConfigError, SpFitError
from .core.pipeline import run_pipeline
from .core.reports import format_summary

CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"
# representative power-law values; not a transcription of the published table
BUNDLED_TABLE = Path(__file__).resolve().parent / "data" / "illustrative_sp_table.csv"

def load_config(cfg_path: Path) -> dict:
    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigError(f"cannot read config {cfg_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {cfg_path}: {exc}") from exc
    if not isinstance(cfg, dict):
        raise ConfigError(f"{cfg_path}: top level must be a mapping")
    return cfg

def _resolve(p: str | Path, base: Path) -> Path:
    p = Path(p).expanduser()
    return p if p.is_absolute() else (base / p).resolve()

def main(argv: list[str] | None = None, config_path: Path = CONFIG_PATH) -> int:
    argv = sys.argv[1:] if argv is None else argv

    # ---------- config ----------
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    base = config_path.parent
    log_cfg = cfg.get("logging", {}) or {}
    logging.basicConfig(level=str(log_cfg.get("level", "WARNING")).upper(),
                        format="%(levelname)s %(name)s: %(message)s")
    verbose = bool(log_cfg.get("verbose", True))

    # the only CLI argument: path to the input table
    if argv:
        in_path = Path(argv[0]).expanduser().resolve()
    else:
        in_path = _resolve((cfg.get("input", {}) or {}).get("path", BUNDLED_TABLE), base)
    out_root = _resolve((cfg.get("output", {}) or {}).get("root", "out"), Path.cwd())

    if verbose:
        print(f"[cfg] input={in_path}")
        print(f"[cfg] output={out_root}")
    if in_path == BUNDLED_TABLE:
        print("[INFO] using the bundled illustrative table (not the published Misell-Burdett values)")

    # ---------- run ----------
    try:
        result = run_pipeline(cfg, in_path, out_root)
    except SpFitError as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    print(f"[summary] {len(result.raw)} observations, {len(result.fits)} apertures")
    decimals = int((cfg.get("reports", {}) or {}).get("decimals", 4))
    print(format_summary(result.summary, decimals=decimals))
    return 0

if __name__ == "__main__":
    sys.exit(main())
