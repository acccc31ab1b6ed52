"""
Tests for EMI calculation and money helpers using Decimal precision.
"""

from decimal import Decimal

from django.test import SimpleTestCase

from apps.core.utils import calculate_emi, percent_of, quantize_money, to_decimal


class CalculateEMITests(SimpleTestCase):
    """Test the reducing-balance EMI formula with Decimal."""

    def test_reference_emi(self):
        """1,000,000 at 12% over 36 months."""
        emi = calculate_emi(Decimal('1000000'), Decimal('12'), 36)
        self.assertIsInstance(emi, Decimal)
        self.assertLess(abs(emi - Decimal('33214.37')), Decimal('0.10'))

    def test_zero_interest(self):
        """0% interest is a simple division."""
        emi = calculate_emi(Decimal('120000'), Decimal('0'), 12)
        self.assertEqual(emi, Decimal('10000.00'))

    def test_one_month_tenure(self):
        emi = calculate_emi(Decimal('100000'), Decimal('12'), 1)
        self.assertEqual(emi, Decimal('101000.00'))

    def test_zero_principal(self):
        """Full down payment leaves nothing to finance."""
        self.assertEqual(calculate_emi(Decimal('0'), Decimal('12'), 36), Decimal('0.00'))

    def test_quantized_to_two_places(self):
        emi = calculate_emi(Decimal('1000'), Decimal('10'), 7)
        self.assertEqual(emi, emi.quantize(Decimal('0.01')))

    def test_deterministic(self):
        first = calculate_emi(Decimal('756432.10'), Decimal('9.75'), 48)
        second = calculate_emi(Decimal('756432.10'), Decimal('9.75'), 48)
        self.assertEqual(first, second)

    def test_accepts_int_and_float(self):
        self.assertEqual(
            calculate_emi(120000, 0.0, 12),
            calculate_emi(Decimal('120000'), Decimal('0'), 12),
        )

    def test_invalid_tenure(self):
        with self.assertRaises(ValueError):
            calculate_emi(Decimal('100000'), Decimal('12'), 0)


class MoneyHelperTests(SimpleTestCase):

    def test_round_half_up(self):
        self.assertEqual(quantize_money(Decimal('2.345')), Decimal('2.35'))
        self.assertEqual(quantize_money(Decimal('2.344')), Decimal('2.34'))

    def test_float_goes_through_str(self):
        self.assertEqual(to_decimal(0.1), Decimal('0.1'))

    def test_none_is_zero(self):
        self.assertEqual(to_decimal(None), Decimal('0'))

    def test_percent_of(self):
        self.assertEqual(percent_of(Decimal('800000'), Decimal('3.5')), Decimal('28000.00'))
        self.assertEqual(percent_of(Decimal('87714.31'), Decimal('10')), Decimal('8771.43'))
