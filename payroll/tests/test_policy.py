import json
from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from payroll.models import PayrollPolicy
from payroll.policy import (
    DEFAULT_POLICIES,
    PolicyError,
    build_snapshot,
    load_policy_snapshot,
    normalize_slabs,
    parse_bool,
    save_policies,
)


def valid_update(**overrides):
    data = {
        'basic_percentage': '60',
        'hra_percentage': '40',
        'pf_enabled': True,
        'esic_enabled': False,
        'ptax_enabled': 'on',
        'ptax_slabs': [{'min_salary': 0, 'max_salary': 25000, 'tax_amount': 130},
                       {'min_salary': 25001, 'max_salary': None, 'tax_amount': 200}],
    }
    data.update(overrides)
    return data


class ParseBoolTests(SimpleTestCase):
    def test_truthy_strings(self):
        for value in ('1', 'true', 'TRUE', 'on', 'yes', ' Yes ', True, 1):
            self.assertTrue(parse_bool(value), value)

    def test_everything_else_is_false(self):
        for value in ('0', 'false', 'off', 'no', '', None, False, 'enabled'):
            self.assertFalse(parse_bool(value), value)


class NormalizeSlabsTests(SimpleTestCase):
    def test_json_string_with_long_keys(self):
        slabs = normalize_slabs(json.dumps([{'min_salary': 0, 'max_salary': 10000, 'tax_amount': 0}]))
        self.assertEqual(slabs[0].max_salary, Decimal('10000'))
        self.assertEqual(slabs[0].tax_amount, Decimal('0'))

    def test_short_key_aliases(self):
        slabs = normalize_slabs([{'min': 25001, 'max': None, 'amount': 200}])
        self.assertEqual(slabs[0].min_salary, Decimal('25001'))
        self.assertIsNone(slabs[0].max_salary)
        self.assertEqual(slabs[0].tax_amount, Decimal('200'))

    def test_empty_max_is_unbounded(self):
        slab = normalize_slabs([{'min_salary': 40001, 'max_salary': '', 'tax_amount': 200}])[0]
        self.assertTrue(slab.contains(Decimal('99999999')))

    def test_empty_value(self):
        self.assertEqual(normalize_slabs(None), ())
        self.assertEqual(normalize_slabs(''), ())

    def test_non_finite_bounds_are_rejected(self):
        for value in ([{'min': 'NaN', 'max': 100, 'amount': 10}],
                      [{'min': 0, 'max': 'Infinity', 'amount': 10}],
                      '[{"min": 0, "max": 100, "amount": "-Infinity"}]'):
            with self.assertRaises(PolicyError):
                normalize_slabs(value)

    def test_malformed_values(self):
        for value in ('{not json', '{"min": 1}', '[1, 2]', [{'min': 'abc', 'max': 1, 'amount': 1}]):
            with self.assertRaises(PolicyError):
                normalize_slabs(value)


class SnapshotTests(SimpleTestCase):
    def test_missing_keys_disable_deductions(self):
        snapshot = build_snapshot({})
        self.assertFalse(snapshot.pf_enabled)
        self.assertFalse(snapshot.esic_enabled)
        self.assertFalse(snapshot.ptax_enabled)
        self.assertEqual(snapshot.slabs(), ())

    def test_slab_lookup_is_inclusive(self):
        snapshot = build_snapshot({'ptax_slabs': json.dumps([
            {'min': 0, 'max': 25000, 'amount': 130},
            {'min': 25001, 'max': None, 'amount': 200},
        ])})
        self.assertEqual(snapshot.find_ptax_slab(Decimal('25000')).tax_amount, Decimal('130'))
        self.assertEqual(snapshot.find_ptax_slab(Decimal('25001')).tax_amount, Decimal('200'))
        self.assertIsNone(snapshot.find_ptax_slab(Decimal('25000.50')))

    def test_malformed_slabs_fail_on_use(self):
        snapshot = build_snapshot({'ptax_enabled': '1', 'ptax_slabs': 'garbage'})
        self.assertTrue(snapshot.ptax_enabled)
        with self.assertRaises(PolicyError):
            snapshot.find_ptax_slab(Decimal('1000'))


class PolicyStoreTests(TestCase):
    def test_defaults_are_seeded(self):
        self.assertEqual(
            set(PayrollPolicy.objects.values_list('key', flat=True)),
            set(DEFAULT_POLICIES)
        )
        snapshot = load_policy_snapshot()
        self.assertTrue(snapshot.pf_enabled)
        self.assertTrue(snapshot.esic_enabled)
        self.assertTrue(snapshot.ptax_enabled)
        self.assertEqual(snapshot.basic_percentage, Decimal('70'))
        self.assertEqual(len(snapshot.slabs()), 5)

    def test_save_policies_stores_text_values(self):
        save_policies(valid_update())

        self.assertEqual(PayrollPolicy.objects.get(key='pf_enabled').value, '1')
        self.assertEqual(PayrollPolicy.objects.get(key='esic_enabled').value, '0')
        self.assertEqual(PayrollPolicy.objects.get(key='ptax_enabled').value, '1')
        stored_slabs = json.loads(PayrollPolicy.objects.get(key='ptax_slabs').value)
        self.assertEqual(len(stored_slabs), 2)

        snapshot = load_policy_snapshot()
        self.assertFalse(snapshot.esic_enabled)
        self.assertEqual(snapshot.basic_percentage, Decimal('60'))

    def test_percentages_must_sum_to_100(self):
        with self.assertRaises(PolicyError):
            save_policies(valid_update(basic_percentage='70', hra_percentage='40'))
        self.assertEqual(PayrollPolicy.objects.get(key='basic_percentage').value, '70')

    def test_missing_fields_are_rejected(self):
        data = valid_update()
        del data['ptax_slabs']
        with self.assertRaises(PolicyError):
            save_policies(data)

    def test_invalid_slabs_are_rejected(self):
        with self.assertRaises(PolicyError):
            save_policies(valid_update(ptax_slabs='[{"min": "x"}]'))

    def test_non_finite_percentage_is_rejected(self):
        with self.assertRaises(PolicyError):
            save_policies(valid_update(basic_percentage='NaN'))
        self.assertEqual(PayrollPolicy.objects.get(key='basic_percentage').value, '70')
