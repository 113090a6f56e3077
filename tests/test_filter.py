import unittest

from icsengine._filter import FilterRegistry


class FilterRegistryTests(unittest.TestCase):
    def test_registration_swallows_one_occurrence(self):
        filters = FilterRegistry()
        filters.register_once('Style 12 set.')
        self.assertIn('Style 12 set.', filters)
        self.assertTrue(filters.take_if_present('Style 12 set.'))
        self.assertFalse(filters.take_if_present('Style 12 set.'))
        self.assertNotIn('Style 12 set.', filters)
        self.assertEqual(len(filters), 0)

    def test_registrations_count(self):
        filters = FilterRegistry()
        filters.register_once('ms set.')
        filters.register_once('ms set.')
        self.assertEqual(len(filters), 2)
        self.assertTrue(filters.take_if_present('ms set.'))
        self.assertTrue(filters.take_if_present('ms set.'))
        self.assertFalse(filters.take_if_present('ms set.'))

    def test_exact_match_only(self):
        filters = FilterRegistry()
        filters.register_once('Bell off.')
        self.assertFalse(filters.take_if_present('Bell off'))
        self.assertFalse(filters.take_if_present(' Bell off.'))
        self.assertTrue(filters.take_if_present('Bell off.'))

    def test_clear(self):
        filters = FilterRegistry()
        filters.register_once('a')
        filters.register_once('b')
        filters.clear()
        self.assertEqual(len(filters), 0)
        self.assertFalse(filters.take_if_present('a'))
