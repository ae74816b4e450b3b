import math
from pathlib import Path
import tempfile
import unittest

from sp_FitReporter.core.errors import DomainError, LoadError
from sp_FitReporter.core.model import RawRow, RawTable
from sp_FitReporter.core.transform import from_log_table, to_log_table
from sp_FitReporter.loaders.table_loader import load

HEADER = "voltage_kV,sp_5mrad,sp_10mrad,sp_15mrad"


def _write_table(path: Path, lines, header=HEADER):
    text = "\n".join(([header] if header is not None else []) + list(lines)) + "\n"
    path.write_text(text, encoding="utf-8")
    return path


def _raw(*rows):
    return RawTable(rows=tuple(RawRow(*r) for r in rows))


class LoaderTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_100kv_row_parsed_and_transformed(self):
        path = _write_table(self.tmp / "sp.csv", [
            "60,4.74e-3,3.10e-3,2.32e-3",
            "80,3.77e-3,2.34e-3,1.76e-3",
            "100,3.09e-3,1.91e-3,1.39e-3",
        ])
        raw = load(path)
        self.assertEqual(3, len(raw))
        row = raw.rows[-1]
        self.assertEqual(100.0, row.voltage_kV)
        self.assertAlmostEqual(3.09e-3, row.sp_5mrad, places=15)

        logs = to_log_table(raw)
        self.assertAlmostEqual(math.log(1000 * 100), logs.rows[-1].ln_voltage_eV, places=12)
        self.assertAlmostEqual(math.log(1e7 * 3.09e-3), logs.rows[-1].ln_sp(5), places=12)

    def test_header_names_do_not_matter_only_order(self):
        path = _write_table(self.tmp / "sp.csv", ["20,1,2,3"], header="V0 [kV],a,b,c")
        raw = load(path)
        self.assertEqual(RawRow(20.0, 1.0, 2.0, 3.0), raw.rows[0])

    def test_semicolon_table_with_decimal_comma(self):
        path = _write_table(self.tmp / "sp.csv", ["20;1,5e-3;2,5e-3;3,5e-3"],
                            header="voltage_kV;sp_5mrad;sp_10mrad;sp_15mrad")
        raw = load(path, {"input": {"sep": ";"}})
        self.assertAlmostEqual(1.5e-3, raw.rows[0].sp_5mrad)
        self.assertAlmostEqual(3.5e-3, raw.rows[0].sp_15mrad)

    def test_missing_file(self):
        with self.assertRaises(LoadError):
            load(self.tmp / "nope.csv")

    def test_directory_is_not_a_table(self):
        with self.assertRaises(LoadError):
            load(self.tmp)

    def test_empty_file(self):
        path = self.tmp / "empty.csv"
        path.write_text("", encoding="utf-8")
        with self.assertRaises(LoadError):
            load(path)

    def test_header_only(self):
        path = _write_table(self.tmp / "sp.csv", [])
        with self.assertRaises(LoadError):
            load(path)

    def test_wrong_column_count(self):
        path = _write_table(self.tmp / "sp.csv", ["20,1,2"], header="voltage_kV,sp_5mrad,sp_10mrad")
        with self.assertRaises(LoadError) as ctx:
            load(path)
        self.assertIn("expected 4 columns", str(ctx.exception))

    def test_row_with_extra_field(self):
        path = _write_table(self.tmp / "sp.csv", ["20,1,2,3", "30,1,2,3,4"])
        with self.assertRaises(LoadError):
            load(path)

    def test_every_row_with_extra_field(self):
        # a consistent fifth field must not be absorbed as a row index
        path = _write_table(self.tmp / "sp.csv", [
            "20,1e-2,8e-3,6e-3,9",
            "30,8e-3,6e-3,4e-3,9",
            "40,6e-3,4e-3,3e-3,9",
        ])
        with self.assertRaises(LoadError):
            load(path)

    def test_five_column_header(self):
        path = _write_table(self.tmp / "sp.csv", ["20,1,2,3,4"],
                            header="voltage_kV,sp_5mrad,sp_10mrad,sp_15mrad,extra")
        with self.assertRaises(LoadError) as ctx:
            load(path)
        self.assertIn("expected 4 columns", str(ctx.exception))

    def test_duplicate_header_names_still_positional(self):
        path = _write_table(self.tmp / "sp.csv", ["20,1,2,3"], header="V,S,S,S")
        self.assertEqual(RawRow(20.0, 1.0, 2.0, 3.0), load(path).rows[0])

    def test_non_numeric_cell_names_column_and_row(self):
        path = _write_table(self.tmp / "sp.csv", ["20,1,2,3", "30,1,abc,3"])
        with self.assertRaises(LoadError) as ctx:
            load(path)
        msg = str(ctx.exception)
        self.assertIn("sp_10mrad", msg)
        self.assertIn("row 2", msg)

    def test_missing_cell_is_rejected(self):
        path = _write_table(self.tmp / "sp.csv", ["20,1,,3"])
        with self.assertRaises(LoadError):
            load(path)

    def test_infinite_cell_is_rejected(self):
        path = _write_table(self.tmp / "sp.csv", ["20,1,inf,3"])
        with self.assertRaises(LoadError):
            load(path)


class TransformTests(unittest.TestCase):
    def test_voltage_is_ln_of_ev(self):
        raw = _raw((20, 1e-3, 2e-3, 3e-3), (37.5, 1e-3, 2e-3, 3e-3), (120, 1e-3, 2e-3, 3e-3))
        logs = to_log_table(raw)
        for r, lr in zip(raw.rows, logs.rows):
            expected = math.log(1000.0 * r.voltage_kV)
            self.assertLessEqual(abs(lr.ln_voltage_eV - expected), 1e-12 * abs(expected))

    def test_round_trip_recovers_raw(self):
        raw = _raw((20, 1.21e-2, 8.81e-3, 6.95e-3), (100, 3.09e-3, 1.91e-3, 1.39e-3))
        back = from_log_table(to_log_table(raw))
        for a, b in zip(raw.rows, back.rows):
            for name in ("voltage_kV", "sp_5mrad", "sp_10mrad", "sp_15mrad"):
                va, vb = getattr(a, name), getattr(b, name)
                self.assertLessEqual(abs(va - vb), 1e-9 * abs(va), name)

    def test_zero_cross_section_raises(self):
        raw = _raw((20, 1e-3, 0.0, 3e-3))
        with self.assertRaises(DomainError) as ctx:
            to_log_table(raw)
        self.assertIn("sp_10mrad", str(ctx.exception))

    def test_negative_voltage_raises(self):
        raw = _raw((20, 1e-3, 2e-3, 3e-3), (-5, 1e-3, 2e-3, 3e-3))
        with self.assertRaises(DomainError):
            to_log_table(raw)

    def test_frames_use_canonical_columns(self):
        raw = _raw((20, 1e-3, 2e-3, 3e-3))
        self.assertEqual(["voltage_kV", "sp_5mrad", "sp_10mrad", "sp_15mrad"], list(raw.to_frame().columns))
        self.assertEqual(["ln_voltage_eV", "ln_sp_5", "ln_sp_10", "ln_sp_15"],
                         list(to_log_table(raw).to_frame().columns))


if __name__ == "__main__":
    unittest.main()
