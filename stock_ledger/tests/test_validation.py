# -*- coding: utf-8 -*-
"""
Reglas de validación de artículos y ventas (funciones puras).
"""
from decimal import Decimal

from stock_ledger.services.validation import (
    MAX_QUANTITY,
    MAX_RECORD_ID,
    ValidationError,
    validate_item_input,
    validate_sale_input,
    validate_sale_shape,
)


def test_valid_item_passes():
    result = validate_item_input('Picanha', 10, '7.50', '10.00', 3, 'kg')
    assert result.ok
    assert result.errors == []


def test_item_reports_every_violation_in_order():
    result = validate_item_input('  ', -1, 0, -5, -2, '')
    assert result.errors == [
        ValidationError.EMPTY_NAME,
        ValidationError.INVALID_QUANTITY,
        ValidationError.INVALID_COST_PRICE,
        ValidationError.INVALID_SELLING_PRICE,
        ValidationError.SELLING_PRICE_TOO_LOW,
        ValidationError.INVALID_MINIMUM_STOCK,
        ValidationError.EMPTY_UNIT,
    ]
    assert result.first_message == 'El nombre es obligatorio'
    assert len(result.messages) == 7


def test_selling_price_must_exceed_cost():
    assert validate_item_input('Vino', 1, '10.00', '10.00', 0, 'un').errors == [
        ValidationError.SELLING_PRICE_TOO_LOW
    ]
    assert validate_item_input('Vino', 1, '10.00', '9.99', 0, 'un').errors == [
        ValidationError.SELLING_PRICE_TOO_LOW
    ]


def test_item_rejects_non_numeric_values():
    result = validate_item_input('Vino', '3', 'abc', None, 1.5, 'un')
    assert ValidationError.INVALID_QUANTITY in result.errors
    assert ValidationError.INVALID_COST_PRICE in result.errors
    assert ValidationError.INVALID_SELLING_PRICE in result.errors
    assert ValidationError.INVALID_MINIMUM_STOCK in result.errors
    # sin ambos precios no se puede comparar
    assert ValidationError.SELLING_PRICE_TOO_LOW not in result.errors


def test_valid_sale_passes():
    assert validate_sale_input(1, 3, 10, Decimal('10.00'), Decimal('30.00')).ok


def test_sale_insufficient_stock():
    result = validate_sale_input(1, 11, 10, Decimal('10.00'), Decimal('110.00'))
    assert result.errors == [ValidationError.INSUFFICIENT_STOCK]


def test_sale_invalid_quantity_does_not_report_stock():
    result = validate_sale_input(1, 0, 10, Decimal('10.00'), Decimal('30.00'))
    assert result.errors == [ValidationError.INVALID_QUANTITY]


def test_sale_calculation_mismatch():
    result = validate_sale_input(1, 3, 10, Decimal('10.00'), Decimal('25.00'))
    assert result.errors == [ValidationError.INVALID_CALCULATION]


def test_sale_reports_all_problems():
    result = validate_sale_input(0, -1, 10, 0, 'x')
    assert result.errors == [
        ValidationError.INVALID_ITEM,
        ValidationError.INVALID_QUANTITY,
        ValidationError.INVALID_UNIT_PRICE,
        ValidationError.INVALID_TOTAL_VALUE,
    ]


def test_sale_shape_ignores_stock_and_price():
    assert validate_sale_shape(1, 500, '30.00').ok
    assert validate_sale_shape('1', 0, 0).errors == [
        ValidationError.INVALID_ITEM,
        ValidationError.INVALID_QUANTITY,
        ValidationError.INVALID_TOTAL_VALUE,
    ]


def test_oversized_amounts_are_invalid_not_errors():
    result = validate_item_input('Caviar', 1, 1e30, '9' * 40, 0, 'un')
    assert result.errors == [
        ValidationError.INVALID_COST_PRICE,
        ValidationError.INVALID_SELLING_PRICE,
    ]
    assert validate_sale_shape(1, 1, 1e30).errors == [ValidationError.INVALID_TOTAL_VALUE]
    assert validate_sale_input(1, 1, 5, 1e30, '10.00').errors == [
        ValidationError.INVALID_UNIT_PRICE
    ]


def test_integer_bounds_match_both_stores():
    assert validate_item_input('Sal', MAX_QUANTITY, '1.00', '2.00', 0, 'un').ok
    assert validate_item_input('Sal', MAX_QUANTITY + 1, '1.00', '2.00', 0, 'un').errors == [
        ValidationError.INVALID_QUANTITY
    ]
    assert validate_sale_shape(MAX_RECORD_ID, 1, '1.00').ok
    assert validate_sale_shape(MAX_RECORD_ID + 1, MAX_QUANTITY + 1, '1.00').errors == [
        ValidationError.INVALID_ITEM,
        ValidationError.INVALID_QUANTITY,
    ]
