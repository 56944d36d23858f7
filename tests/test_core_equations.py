import unittest
from dataclasses import asdict, replace
from math import inf, isfinite, isnan, nan
from pathlib import Path

import numpy as np
import pandas as pd

from fandesign.core import (
    MATERIALS,
    BladeType,
    ConfigurationError,
    DesignInput,
    Material,
    air_properties,
    analyze_power,
    analyze_structure,
    blade_count,
    degenerate_fields,
    design_sweep,
    evaluate,
    export_script,
    motor_status,
    recommend_blade,
    size_shaft,
    stress_status,
)


REFERENCE = DesignInput(
    flow_rate=5000.0,
    static_pressure=1000.0,
    rpm=1750.0,
    motor_rating=10.0,
    temp=70.0,
    altitude=0.0,
    outlet_angle=35.0,
    inlet_angle=25.0,
    material="Steel",
    blade_type=BladeType.BACKWARD,
)


class WorkedScenarioTests(unittest.TestCase):
    def setUp(self) -> None:
        self.result = evaluate(REFERENCE)

    def test_numeric_values(self) -> None:
        expected = {
            "air_density_si": 1.201,
            "specific_speed": 43600.0,
            "eff_static": 0.954,
            "tip_speed": 49.4,
            "d2_mm": 539.0,
            "d1_mm": 270.0,
            "safety_factor": 30.1,
            "brake_power_hp": 3.31,
            "motor_load_pct": 33.1,
        }
        for field, value in expected.items():
            np.testing.assert_allclose(getattr(self.result, field), value, rtol=0.01, err_msg=field)

    def test_statuses(self) -> None:
        r = self.result
        self.assertEqual(r.blade_recommendation, "Forward")
        self.assertEqual(r.tip_speed_check, "OK")
        self.assertEqual(r.stress_status, "SAFE")
        self.assertEqual(r.motor_check, "OK")
        self.assertEqual(r.altitude_warning, "OK")

    def test_blades_and_shaft(self) -> None:
        self.assertEqual(self.result.blade_count, 10)
        self.assertIsInstance(self.result.blade_count, int)
        self.assertEqual(self.result.shaft_dia_mm, 20.0)

    def test_script(self) -> None:
        self.assertEqual(
            self.result.cad_script,
            "; Fan Design\nCIRCLE 0,0 539\nCIRCLE 0,0 270\n; Blades: 10",
        )

    def test_derived_geometry(self) -> None:
        r = self.result
        self.assertAlmostEqual(r.d1_mm, 0.5 * r.d2_mm)
        self.assertAlmostEqual(r.hub_mm, 0.4 * r.d1_mm)
        self.assertAlmostEqual(r.b1_mm, 2.0 * r.b2_mm)
        np.testing.assert_allclose(r.b2_mm, 112.8, rtol=0.01)
        np.testing.assert_allclose(r.torque_nm, 13.47, rtol=0.01)

    def test_deterministic(self) -> None:
        self.assertEqual(asdict(evaluate(REFERENCE)), asdict(self.result))

    def test_no_degenerate_fields(self) -> None:
        self.assertEqual(degenerate_fields(self.result), [])


class MaterialBaselineTests(unittest.TestCase):
    def test_matches_baseline_csv(self) -> None:
        baseline_path = Path(__file__).resolve().parent / "data" / "materials_baseline.csv"
        baseline = pd.read_csv(baseline_path)
        rows = []
        for key in baseline["material"]:
            r = evaluate(replace(REFERENCE, material=key))
            rows.append({"sigma_mpa": r.sigma_mpa, "safety_factor": r.safety_factor, "stress_status": r.stress_status})
        df = pd.DataFrame(rows)
        np.testing.assert_allclose(
            df[["sigma_mpa", "safety_factor"]].values,
            baseline[["sigma_mpa", "safety_factor"]].values,
            rtol=1e-4,
        )
        self.assertEqual(list(df["stress_status"]), list(baseline["stress_status"]))

    def test_catalog_is_read_only(self) -> None:
        with self.assertRaises(TypeError):
            MATERIALS["Unobtainium"] = Material("x", 1.0, 1.0, 0.3, 1.0, 1.0)  # type: ignore[index]
        self.assertEqual(len(MATERIALS), 5)


class ConfigurationTests(unittest.TestCase):
    def test_unknown_material_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            evaluate(replace(REFERENCE, material="Titanium"))

    def test_custom_catalog(self) -> None:
        catalog = {"Titanium": Material("Titanium", 4430.0, 880.0, 0.34, 114.0, 30.0)}
        r = evaluate(replace(REFERENCE, material="Titanium"), catalog)
        self.assertEqual(r.stress_status, "SAFE")


class ClassificationTests(unittest.TestCase):
    def test_altitude_boundary(self) -> None:
        self.assertEqual(air_properties(70.0, 5000.0).altitude_warning, "OK")
        self.assertEqual(air_properties(70.0, 5001.0).altitude_warning, "High altitude warning")

    def test_blade_recommendation_bands(self) -> None:
        self.assertEqual(recommend_blade(4999.0), "Radial")
        self.assertEqual(recommend_blade(5000.0), "Backward Curved")
        self.assertEqual(recommend_blade(30000.0), "Backward Curved")
        self.assertEqual(recommend_blade(30001.0), "Forward")
        self.assertEqual(recommend_blade(nan), "Backward Curved")

    def test_stress_status_bands(self) -> None:
        self.assertEqual(stress_status(2.01), "SAFE")
        self.assertEqual(stress_status(2.0), "ACCEPTABLE")
        self.assertEqual(stress_status(1.51), "ACCEPTABLE")
        self.assertEqual(stress_status(1.5), "UNSAFE")
        self.assertEqual(stress_status(-inf), "UNSAFE")
        self.assertEqual(stress_status(nan), "UNSAFE")

    def test_motor_status_bands(self) -> None:
        self.assertEqual(motor_status(100.5), "OVERLOADED")
        self.assertEqual(motor_status(100.0), "High Load")
        self.assertEqual(motor_status(85.0), "OK")
        self.assertEqual(motor_status(0.0), "OK")

    def test_status_consistency_over_sweep(self) -> None:
        for r in design_sweep(REFERENCE, "static_pressure", 2500.0, 12):
            self.assertEqual(r.stress_status == "UNSAFE", r.safety_factor <= 1.5)
            self.assertEqual(r.motor_check == "OVERLOADED", r.motor_load_pct > 100)

    def test_tip_speed_limit(self) -> None:
        fast = evaluate(replace(REFERENCE, static_pressure=40000.0))
        self.assertGreater(fast.tip_speed, 200.0)
        np.testing.assert_allclose(fast.tip_speed, 312.4, rtol=0.01)
        self.assertEqual(fast.tip_speed_check, "Tip speed too high!")

    def test_zero_stress_is_unsafe(self) -> None:
        s = analyze_structure(0.0, MATERIALS["Steel"])
        self.assertEqual(s.stress_status, "UNSAFE")
        self.assertEqual(s.safety_factor, 0.0)
        s = analyze_structure(nan, MATERIALS["Steel"])
        self.assertEqual(s.stress_status, "UNSAFE")
        self.assertEqual(s.safety_factor, 0.0)

    def test_power_uses_given_pressure(self) -> None:
        p = analyze_power(REFERENCE, 0.5, 2.0)
        np.testing.assert_allclose(p.air_power_hp, 5000.0 * 2.0 / 6356.0)
        np.testing.assert_allclose(p.brake_power_hp, 2.0 * p.air_power_hp)
        r = evaluate(REFERENCE)
        p = analyze_power(REFERENCE, r.eff_static, r.pressure_inwg)
        self.assertEqual(p.brake_power_hp, r.brake_power_hp)


class BladeCountTests(unittest.TestCase):
    def test_bounds_over_angles(self) -> None:
        for angle in np.linspace(-180.0, 360.0, 109):
            r = evaluate(replace(REFERENCE, outlet_angle=float(angle)))
            self.assertIsInstance(r.blade_count, int)
            self.assertGreaterEqual(r.blade_count, 6)
            self.assertLessEqual(r.blade_count, 12)

    def test_equal_diameters_default_to_ten(self) -> None:
        self.assertEqual(blade_count(35.0, 0.0, 0.0), 10)
        self.assertEqual(blade_count(35.0, inf, inf), 10)
        self.assertEqual(blade_count(35.0, nan, nan), 10)

    def test_clamped(self) -> None:
        self.assertEqual(blade_count(90.0, 1.0, 0.5), 12)
        self.assertEqual(blade_count(5.0, 1.0, 0.5), 6)


class DegenerateInputTests(unittest.TestCase):
    def test_zero_rpm_returns_result(self) -> None:
        r = evaluate(replace(REFERENCE, rpm=0.0))
        self.assertTrue(np.isinf(r.d2_mm))
        self.assertEqual(r.blade_count, 10)
        self.assertIn("d2_mm", degenerate_fields(r))
        # torque uses an rpm floor of 1
        np.testing.assert_allclose(r.torque_nm, r.brake_power_hp * 0.7457 * 9550.0)

    def test_zero_pressure(self) -> None:
        r = evaluate(replace(REFERENCE, static_pressure=0.0))
        self.assertEqual(r.tip_speed, 0.0)
        self.assertEqual(r.stress_status, "UNSAFE")
        self.assertEqual(r.brake_power_hp, 0.0)
        self.assertEqual(r.shaft_dia_mm, 20.0)
        self.assertTrue(isfinite(r.specific_speed))

    def test_absolute_zero_temperature(self) -> None:
        r = evaluate(replace(REFERENCE, temp=-460.0))
        self.assertFalse(isfinite(r.air_density_si))
        self.assertIn("air_density_si", degenerate_fields(r))

    def test_zero_motor_rating(self) -> None:
        r = evaluate(replace(REFERENCE, motor_rating=0.0))
        self.assertEqual(r.motor_load_pct, 0.0)
        self.assertEqual(r.motor_check, "OK")

    def test_negative_and_infinite_inputs_do_not_raise(self) -> None:
        for field in ("flow_rate", "static_pressure", "rpm", "temp", "altitude", "outlet_angle"):
            for value in (-1e6, -1.0, inf, -inf, 1e300):
                r = evaluate(replace(REFERENCE, **{field: value}))
                self.assertIn(r.stress_status, ("SAFE", "ACCEPTABLE", "UNSAFE"))
                self.assertGreaterEqual(r.blade_count, 6)
                self.assertLessEqual(r.blade_count, 12)

    def test_negative_torque_gives_nan_shaft(self) -> None:
        self.assertTrue(isnan(size_shaft(-5.0)))


class SafetyMonotonicityTests(unittest.TestCase):
    def test_rpm_never_increases_safety(self) -> None:
        factors = [r.safety_factor for r in design_sweep(REFERENCE, "rpm", 250.0, 20)]
        for a, b in zip(factors, factors[1:]):
            self.assertLessEqual(b, a)


class ShaftAndScriptTests(unittest.TestCase):
    def test_floor(self) -> None:
        self.assertEqual(size_shaft(0.0), 20.0)
        self.assertEqual(size_shaft(13.47), 20.0)

    def test_large_torque(self) -> None:
        # (16 * 1000 * 1.5 / (pi * 40e6)) ** (1/3) = 57.6 mm
        self.assertEqual(size_shaft(1000.0), 58.0)

    def test_script_rounding(self) -> None:
        self.assertEqual(export_script(100.5, 50.25, 7), "; Fan Design\nCIRCLE 0,0 101\nCIRCLE 0,0 50\n; Blades: 7")

    def test_script_non_finite(self) -> None:
        lines = export_script(inf, inf, 10).splitlines()
        self.assertEqual(lines[1], "CIRCLE 0,0 inf")


if __name__ == "__main__":
    unittest.main()
