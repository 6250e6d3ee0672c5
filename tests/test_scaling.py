from __future__ import annotations

import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(TESTS_DIR.parent))

from mermaid_pdf.scaling import format_number, scale_dimension, scale_style_property, scale_viewbox


class ScaleDimensionTests(unittest.TestCase):
    def test_scales_number_and_keeps_unit(self) -> None:
        self.assertEqual(scale_dimension("2px", 10), "20px")
        self.assertEqual(scale_dimension("3.5em", 2), "7em")
        self.assertEqual(scale_dimension("10%", 0.5), "5%")
        self.assertEqual(scale_dimension("12", 1.5), "18")

    def test_unit_case_is_preserved(self) -> None:
        self.assertEqual(scale_dimension("4PX", 2), "8PX")

    def test_unit_factor_is_identity(self) -> None:
        for value in ["12px", "3.5", "10%", "0.25em", "100", "1.5pt"]:
            with self.subTest(value=value):
                self.assertEqual(scale_dimension(value, 1), value)

    def test_unit_factor_writes_numbers_in_shortest_form(self) -> None:
        for value, expected in [("3.50px", "3.5px"), ("007", "7"), ("1.", "1")]:
            with self.subTest(value=value):
                self.assertEqual(scale_dimension(value, 1), expected)

    def test_non_numeric_values_are_unchanged(self) -> None:
        for value in ["auto", "inherit", "-5px", "px", "1 px", "calc(1px)"]:
            for factor in (0.5, 1, 10):
                with self.subTest(value=value, factor=factor):
                    self.assertEqual(scale_dimension(value, factor), value)

    def test_unparsable_numbers_are_unchanged(self) -> None:
        self.assertEqual(scale_dimension(".", 10), ".")
        self.assertEqual(scale_dimension("1.2.3px", 10), "1.2.3px")

    def test_empty_values_pass_through(self) -> None:
        self.assertEqual(scale_dimension("", 10), "")
        self.assertIsNone(scale_dimension(None, 10))

    def test_fractional_results(self) -> None:
        self.assertEqual(scale_dimension("3px", 0.5), "1.5px")


class FormatNumberTests(unittest.TestCase):
    def test_integral_values_have_no_fraction(self) -> None:
        self.assertEqual(format_number(20.0), "20")
        self.assertEqual(format_number(-8.0), "-8")
        self.assertEqual(format_number(0.0), "0")

    def test_fractional_values(self) -> None:
        self.assertEqual(format_number(100.5), "100.5")


class ScaleStylePropertyTests(unittest.TestCase):
    def test_scales_target_property(self) -> None:
        self.assertEqual(
            scale_style_property("font-size: 12px; fill: red", "font-size", 2),
            "font-size: 24px; fill: red",
        )

    def test_property_match_is_case_insensitive_and_whitespace_tolerant(self) -> None:
        self.assertEqual(
            scale_style_property("fill:red;FONT-SIZE :10px;stroke:#333", "font-size", 2),
            "fill:red;font-size: 20px;stroke:#333",
        )

    def test_every_occurrence_is_scaled(self) -> None:
        self.assertEqual(
            scale_style_property("stroke-width:1px;stroke-width : 3px", "stroke-width", 2),
            "stroke-width: 2px;stroke-width: 6px",
        )

    def test_unrelated_declarations_survive_byte_for_byte(self) -> None:
        others = ["fill:#fff", " stroke : #333 ", "opacity:0.5", "font-family: 'trebuchet ms', verdana"]
        style = ";".join(others + ["stroke-width:2px"])
        result = scale_style_property(style, "stroke-width", 10)
        self.assertEqual(result, ";".join(others + ["stroke-width: 20px"]))

    def test_missing_property_returns_input(self) -> None:
        style = "fill:#fff;stroke:#000"
        self.assertEqual(scale_style_property(style, "font-size", 3), style)

    def test_non_px_values_are_left_alone(self) -> None:
        style = "font-size: 1.2em"
        self.assertEqual(scale_style_property(style, "font-size", 3), style)


class ScaleViewboxTests(unittest.TestCase):
    def test_divides_width_and_height(self) -> None:
        self.assertEqual(scale_viewbox("0 0 800 600", 10), "0 0 80 60")

    def test_offsets_are_kept(self) -> None:
        self.assertEqual(scale_viewbox("-8 -8 100.5 50", 1), "-8 -8 100.5 50")
        self.assertEqual(scale_viewbox("-8 4 200 100", 2), "-8 4 100 50")

    def test_malformed_declarations_are_unchanged(self) -> None:
        for viewbox in ["0 0 800", "0 0 800 600 1", "0 0 a b", "0,0,800,600", "", "0 0 nan 5"]:
            with self.subTest(viewbox=viewbox):
                self.assertEqual(scale_viewbox(viewbox, 10), viewbox)


if __name__ == "__main__":
    unittest.main()
