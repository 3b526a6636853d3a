import math
import sys
import unittest
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from models import Ingredient, Recipe
from quantity_parser import parse_quantity
from scaler import (
    adjust_multiplier,
    baseline_label,
    format_ingredient_line,
    format_quantity,
    scale_amount_string,
    scale_multiplier,
    scaling_baseline,
)


class FormatQuantityTests(unittest.TestCase):
    def test_trailing_zeros_are_removed(self) -> None:
        self.assertEqual(format_quantity(1.50), "1.5")
        self.assertEqual(format_quantity(2.00), "2")
        self.assertEqual(format_quantity(3), "3")

    def test_rounds_to_two_decimals(self) -> None:
        self.assertEqual(format_quantity(1 / 3), "0.33")
        self.assertEqual(format_quantity(2 / 3), "0.67")

    def test_exact_halves_round_up(self) -> None:
        self.assertEqual(format_quantity(0.125), "0.13")
        self.assertEqual(format_quantity(0.625), "0.63")
        self.assertEqual(format_quantity(2.125), "2.13")
        self.assertEqual(format_quantity(1.999), "2")

    def test_none(self) -> None:
        self.assertEqual(format_quantity(None), "")


class ScaleAmountStringTests(unittest.TestCase):
    def test_multiplier_one_is_identity(self) -> None:
        for line in ["2 1/2 cups", "1,5 dl", "1/0 cup", "to taste", "0.333 g", "Bake at 200°C for 30 min", ""]:
            self.assertEqual(scale_amount_string(line, 1), line)

    def test_scales_every_kind_of_number(self) -> None:
        self.assertEqual(scale_amount_string("2 1/2 cups", 2), "5 cups")
        self.assertEqual(scale_amount_string("1/2 tsp", 3), "1.5 tsp")
        self.assertEqual(scale_amount_string("1,5 dl", 2), "3 dl")
        self.assertEqual(scale_amount_string("1-2", 2), "2-4")

    def test_halved_quarters_round_up(self) -> None:
        self.assertEqual(scale_amount_string("1/4 cup", 0.5), "0.13 cup")
        self.assertEqual(scale_amount_string("5/4 cup", 0.5), "0.63 cup")

    def test_scaled_value_matches_product(self) -> None:
        for value, multiplier in [("1.25", 3), ("3/4", 2), ("7", 1.5), ("2 1/3", 2)]:
            scaled = scale_amount_string(value, multiplier)
            expected = parse_quantity(value) * multiplier
            self.assertAlmostEqual(parse_quantity(scaled), expected, delta=0.005)

    def test_temperature_and_time_are_untouched(self) -> None:
        text = "Bake at 200°C for 30 min"
        self.assertEqual(scale_amount_string(text, 2), text)
        self.assertEqual(scale_amount_string("Grädda i 25 minuter", 3), "Grädda i 25 minuter")

    def test_only_quantities_next_to_time_words_are_kept(self) -> None:
        self.assertEqual(scale_amount_string("2 eggs, rest 10 min", 2), "4 eggs, rest 10 min")

    def test_text_without_numbers(self) -> None:
        self.assertEqual(scale_amount_string("to taste", 4), "to taste")

    def test_zero_denominator_is_left_alone(self) -> None:
        self.assertEqual(scale_amount_string("1/0 cup", 2), "1/0 cup")
        self.assertEqual(scale_amount_string("1/0 cup and 2 eggs", 2), "1/0 cup and 4 eggs")

    def test_invalid_multiplier_returns_input(self) -> None:
        self.assertEqual(scale_amount_string("2 cups", 0), "2 cups")
        self.assertEqual(scale_amount_string("2 cups", -1), "2 cups")
        self.assertEqual(scale_amount_string("2 cups", math.nan), "2 cups")
        self.assertEqual(scale_amount_string("2 cups", math.inf), "2 cups")


class IngredientLineTests(unittest.TestCase):
    def test_joins_non_empty_parts(self) -> None:
        flour = Ingredient(name="flour", amount="2", unit="cups")
        self.assertEqual(format_ingredient_line(flour), "2 cups flour")
        self.assertEqual(format_ingredient_line(flour, 2), "4 cups flour")
        self.assertEqual(format_ingredient_line(flour, 2, scale=False), "2 cups flour")
        self.assertEqual(format_ingredient_line(Ingredient(name="salt")), "salt")


class MultiplierTests(unittest.TestCase):
    def test_food_scales_from_servings(self) -> None:
        recipe = Recipe(id="r1", base_servings_count=4)
        self.assertEqual(scaling_baseline(recipe), 4)
        self.assertEqual(scale_multiplier(recipe, 8), 2)
        self.assertEqual(scale_multiplier(recipe, 2), 0.5)
        self.assertEqual(scale_multiplier(recipe), 1)
        self.assertEqual(baseline_label(recipe), "portions")

    def test_baking_scales_in_batches(self) -> None:
        recipe = Recipe(id="r2", base_servings_count=12, recipe_type="baking")
        self.assertEqual(scaling_baseline(recipe), 1)
        self.assertEqual(scale_multiplier(recipe, 2), 2)
        self.assertEqual(baseline_label(recipe), "batches")

    def test_adjust_never_goes_below_minimum(self) -> None:
        self.assertEqual(adjust_multiplier(2, 1), 3)
        self.assertEqual(adjust_multiplier(1.5, -1), 0.5)
        self.assertEqual(adjust_multiplier(1, -1), 1)
        self.assertEqual(adjust_multiplier(0.5, -1), 0.5)


if __name__ == "__main__":
    unittest.main()
