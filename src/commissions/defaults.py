"""Default commission rule sets installed for new organizations."""
from decimal import Decimal

DEFAULT_SALES_TIERS = [
    {"min_value": Decimal("0"), "fixed_amount": Decimal("0"), "percentage": Decimal("-25"), "label": "Below floor"},
    {"min_value": Decimal("2"), "fixed_amount": Decimal("5000")},
    {"min_value": Decimal("3"), "fixed_amount": Decimal("10000")},
    {"min_value": Decimal("4"), "fixed_amount": Decimal("15000")},
    {"min_value": Decimal("5"), "fixed_amount": Decimal("21500")},
    {"min_value": Decimal("6"), "fixed_amount": Decimal("28000")},
    {"min_value": Decimal("7"), "fixed_amount": Decimal("36000")},
    {"min_value": Decimal("8"), "fixed_amount": Decimal("45000")},
    {"min_value": Decimal("9"), "fixed_amount": Decimal("55000")},
    {"min_value": Decimal("10"), "fixed_amount": Decimal("70000")},
]

DEFAULT_DISPATCH_TIERS = [
    {"min_value": Decimal("651"), "max_value": Decimal("850"), "percentage": Decimal("2.5")},
    {"min_value": Decimal("851"), "max_value": Decimal("1500"), "percentage": Decimal("5")},
    {"min_value": Decimal("1501"), "max_value": Decimal("2700"), "percentage": Decimal("10")},
    {"min_value": Decimal("2701"), "max_value": Decimal("3700"), "percentage": Decimal("12.5")},
    {"min_value": Decimal("3701"), "max_value": None, "percentage": Decimal("15")},
]

DEFAULT_RULE_SETS = {
    "sales": DEFAULT_SALES_TIERS,
    "dispatch": DEFAULT_DISPATCH_TIERS,
}
