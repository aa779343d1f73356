"""
Payroll policy store.

Policies are key/value rows. A payroll run reads them once into an
immutable PayrollPolicySnapshot; the PTAX slab list is decoded here so the
engine only ever sees typed PtaxSlab records.
"""

import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.db import transaction

from .models import PayrollPolicy

TRUE_STRINGS = {'1', 'true', 'on', 'yes'}
BOOLEAN_KEYS = ('pf_enabled', 'esic_enabled', 'ptax_enabled')
PERCENTAGE_KEYS = ('basic_percentage', 'hra_percentage')

# Default West Bengal professional tax slabs
DEFAULT_PTAX_SLABS = [
    {'min_salary': 0, 'max_salary': 10000, 'tax_amount': 0},
    {'min_salary': 10001, 'max_salary': 15000, 'tax_amount': 110},
    {'min_salary': 15001, 'max_salary': 25000, 'tax_amount': 130},
    {'min_salary': 25001, 'max_salary': 40000, 'tax_amount': 150},
    {'min_salary': 40001, 'max_salary': None, 'tax_amount': 200},
]

DEFAULT_POLICIES = {
    'basic_percentage': ('70', 'Percentage of Gross Salary allocated to Basic'),
    'hra_percentage': ('30', 'Percentage of Gross Salary allocated to HRA'),
    'pf_enabled': ('1', 'Global enable/disable PF (1=On, 0=Off)'),
    'esic_enabled': ('1', 'Global enable/disable ESIC (1=On, 0=Off)'),
    'ptax_enabled': ('1', 'Global enable/disable Professional Tax (1=On, 0=Off)'),
    'ptax_slabs': (json.dumps(DEFAULT_PTAX_SLABS), 'Professional Tax Slabs (JSON)'),
}


class PolicyError(ValueError):
    """Raised for policy values that cannot be interpreted."""


@dataclass(frozen=True)
class PtaxSlab:
    min_salary: Decimal
    max_salary: Decimal  # None means no upper bound
    tax_amount: Decimal

    def contains(self, amount):
        if amount < self.min_salary:
            return False
        return self.max_salary is None or amount <= self.max_salary


@dataclass(frozen=True)
class PayrollPolicySnapshot:
    pf_enabled: bool = False
    esic_enabled: bool = False
    ptax_enabled: bool = False
    basic_percentage: Decimal = Decimal('70')
    hra_percentage: Decimal = Decimal('30')
    ptax_slabs: tuple = ()
    ptax_slabs_error: str = None

    def slabs(self):
        """Typed slab list. Raises PolicyError if the stored slabs were malformed."""
        if self.ptax_slabs_error:
            raise PolicyError(self.ptax_slabs_error)
        return self.ptax_slabs

    def find_ptax_slab(self, amount):
        for slab in self.slabs():
            if slab.contains(amount):
                return slab
        return None


def parse_bool(value):
    """Loose boolean parsing: 1/true/on/yes are true, everything else false."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_STRINGS


def _to_decimal(value, field):
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise PolicyError(f"Invalid {field} value: {value!r}")
    if not number.is_finite():
        raise PolicyError(f"Invalid {field} value: {value!r}")
    return number


def _pick(slab, *keys):
    for key in keys:
        if key in slab:
            return slab[key]
    return None


def normalize_slabs(value):
    """
    Decode PTAX slabs from a JSON string or an already decoded list.

    Accepts both min_salary/max_salary/tax_amount and min/max/amount keys.
    A missing or empty max means the slab has no upper bound.
    """
    if value is None or value == '':
        return ()
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise PolicyError(f"ptax_slabs is not valid JSON: {e}")
    if value is None:
        return ()
    if not isinstance(value, list):
        raise PolicyError("ptax_slabs must be a list of slabs")

    slabs = []
    for raw in value:
        if not isinstance(raw, dict):
            raise PolicyError(f"Invalid PTAX slab: {raw!r}")
        min_value = _pick(raw, 'min_salary', 'min')
        max_value = _pick(raw, 'max_salary', 'max')
        tax_value = _pick(raw, 'tax_amount', 'amount')
        slabs.append(PtaxSlab(
            min_salary=_to_decimal(min_value if min_value not in (None, '') else 0, 'min_salary'),
            max_salary=None if max_value in (None, '') else _to_decimal(max_value, 'max_salary'),
            tax_amount=_to_decimal(tax_value if tax_value not in (None, '') else 0, 'tax_amount'),
        ))
    return tuple(slabs)


def get_policy_map():
    """All stored policies as a plain key -> value dict."""
    return dict(PayrollPolicy.objects.values_list('key', 'value'))


def build_snapshot(policies):
    """Build a snapshot from a key -> value mapping."""
    slabs = ()
    slabs_error = None
    try:
        slabs = normalize_slabs(policies.get('ptax_slabs'))
    except PolicyError as e:
        slabs_error = str(e)

    return PayrollPolicySnapshot(
        pf_enabled=parse_bool(policies.get('pf_enabled')),
        esic_enabled=parse_bool(policies.get('esic_enabled')),
        ptax_enabled=parse_bool(policies.get('ptax_enabled')),
        basic_percentage=_to_decimal(policies.get('basic_percentage') or 70, 'basic_percentage'),
        hra_percentage=_to_decimal(policies.get('hra_percentage') or 30, 'hra_percentage'),
        ptax_slabs=slabs,
        ptax_slabs_error=slabs_error,
    )


def load_policy_snapshot():
    """Read every policy row once and return an immutable snapshot."""
    return build_snapshot(get_policy_map())


def validate_policy_update(data):
    """
    Validate a settings update and return the values to store as text.
    Raises PolicyError with a readable message.
    """
    cleaned = {}
    missing = [key for key in PERCENTAGE_KEYS + BOOLEAN_KEYS + ('ptax_slabs',) if key not in data]
    if missing:
        raise PolicyError(f"Missing required fields: {', '.join(missing)}")

    for key in PERCENTAGE_KEYS:
        percentage = _to_decimal(data[key], key)
        if percentage < 0 or percentage > 100:
            raise PolicyError(f"{key} must be between 0 and 100")
        cleaned[key] = str(data[key])

    if Decimal(cleaned['basic_percentage']) + Decimal(cleaned['hra_percentage']) != 100:
        raise PolicyError("Basic and HRA percentages must sum to 100%")

    for key in BOOLEAN_KEYS:
        cleaned[key] = '1' if parse_bool(data[key]) else '0'

    slabs_value = data['ptax_slabs']
    normalize_slabs(slabs_value)
    cleaned['ptax_slabs'] = slabs_value if isinstance(slabs_value, str) else json.dumps(slabs_value)
    return cleaned


def save_policies(data):
    """Validate and upsert policy values."""
    cleaned = validate_policy_update(data)
    with transaction.atomic():
        for key, value in cleaned.items():
            PayrollPolicy.objects.update_or_create(key=key, defaults={'value': value})
    return cleaned
