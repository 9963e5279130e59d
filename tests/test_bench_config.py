"""Tests for calibench.bench.config — configuration, validation, profiles."""

from __future__ import annotations

import dataclasses
import tempfile
import unittest
from pathlib import Path

from calibench.bench.config import (
    BenchmarkConfig,
    check_config,
    config_from_profile,
    load_profile,
    validate_config,
)


class TestBenchmarkConfig(unittest.TestCase):
    """Tests for BenchmarkConfig defaults and derived values."""

    def test_defaults(self) -> None:
        cfg = BenchmarkConfig()
        self.assertEqual(cfg.measurement_time, 5.0)
        self.assertEqual(cfg.warm_up_time, 3.0)
        self.assertEqual(cfg.num_samples, 100)
        self.assertEqual(cfg.num_resamples, 10_000)
        self.assertTrue(cfg.dump_results_to_disk)
        self.assertIsNone(cfg.max_iterations)

    def test_nanosecond_views(self) -> None:
        cfg = BenchmarkConfig(measurement_time=0.25, warm_up_time=2)
        self.assertEqual(cfg.measurement_time_ns, 250_000_000)
        self.assertEqual(cfg.warm_up_time_ns, 2_000_000_000)

    def test_frozen(self) -> None:
        cfg = BenchmarkConfig()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            cfg.num_samples = 3  # type: ignore[misc]


class TestValidateConfig(unittest.TestCase):
    """Tests for validate_config() and check_config()."""

    def _fields(self, cfg: BenchmarkConfig, severity: str = "error") -> list[str]:
        return [e.field for e in validate_config(cfg) if e.severity == severity]

    def test_default_is_valid(self) -> None:
        self.assertEqual(validate_config(BenchmarkConfig()), [])

    def test_negative_durations(self) -> None:
        fields = self._fields(BenchmarkConfig(measurement_time=-1, warm_up_time=-0.5))
        self.assertIn("measurement_time", fields)
        self.assertIn("warm_up_time", fields)

    def test_zero_durations_allowed(self) -> None:
        self.assertEqual(self._fields(BenchmarkConfig(measurement_time=0, warm_up_time=0)), [])

    def test_zero_samples(self) -> None:
        self.assertIn("num_samples", self._fields(BenchmarkConfig(num_samples=0)))

    def test_single_sample_warns(self) -> None:
        self.assertIn("num_samples", self._fields(BenchmarkConfig(num_samples=1), "warning"))
        self.assertEqual(self._fields(BenchmarkConfig(num_samples=1)), [])

    def test_negative_resamples(self) -> None:
        self.assertIn("num_resamples", self._fields(BenchmarkConfig(num_resamples=-1)))

    def test_max_iterations_must_be_positive(self) -> None:
        self.assertIn("max_iterations", self._fields(BenchmarkConfig(max_iterations=0)))
        self.assertEqual(self._fields(BenchmarkConfig(max_iterations=1)), [])

    def test_check_config_raises_with_all_errors(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            check_config(BenchmarkConfig(num_samples=0, warm_up_time=-1))
        message = str(ctx.exception)
        self.assertIn("num_samples", message)
        self.assertIn("warm_up_time", message)

    def test_check_config_logs_warnings(self) -> None:
        with self.assertLogs("calibench", level="WARNING") as cm:
            check_config(BenchmarkConfig(num_samples=1))
        self.assertIn("num_samples", cm.output[0])


class TestProfiles(unittest.TestCase):
    """Tests for load_profile() and config_from_profile()."""

    def _write(self, tmpdir: str, text: str) -> Path:
        path = Path(tmpdir) / "profile.yaml"
        path.write_text(text)
        return path

    def test_load_and_build(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(
                tmpdir,
                "measurement_time: 2.5\nwarm_up_time: 1\nnum_samples: 50\n"
                "dump_results_to_disk: false\n",
            )
            cfg = config_from_profile(load_profile(path))
        self.assertEqual(cfg.measurement_time, 2.5)
        self.assertEqual(cfg.warm_up_time, 1)
        self.assertEqual(cfg.num_samples, 50)
        self.assertFalse(cfg.dump_results_to_disk)
        self.assertEqual(cfg.num_resamples, 10_000)

    def test_empty_profile(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "")
            self.assertEqual(load_profile(path), {})

    def test_missing_profile(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_profile(Path("/nonexistent/profile.yaml"))

    def test_non_mapping_profile(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "- a\n- b\n")
            with self.assertRaises(ValueError):
                load_profile(path)

    def test_unknown_option_rejected(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            config_from_profile({"num_samples": 10, "noise_threshold": 0.5})
        self.assertIn("noise_threshold", str(ctx.exception))

    def test_cli_overrides_win(self) -> None:
        cfg = config_from_profile(
            {"num_samples": 10, "warm_up_time": 1.0},
            cli_overrides={"num_samples": 20, "warm_up_time": None},
        )
        self.assertEqual(cfg.num_samples, 20)
        self.assertEqual(cfg.warm_up_time, 1.0)

    def test_wrong_types_rejected(self) -> None:
        for profile in (
            {"num_samples": "ten"},
            {"num_samples": True},
            {"measurement_time": "5s"},
            {"max_iterations": 2.5},
            {"dump_results_to_disk": "yes"},
        ):
            with self.subTest(profile=profile):
                with self.assertRaises(ValueError):
                    config_from_profile(profile)

    def test_null_max_iterations(self) -> None:
        cfg = config_from_profile({"max_iterations": None})
        self.assertIsNone(cfg.max_iterations)


if __name__ == "__main__":
    unittest.main()
