#!/usr/bin/env python3
"""
Unit tests for fleet_options.py.
"""

import unittest

from simfleet.shared import fleet_options
from simfleet.shared import ios_constants
from simfleet.shared import ios_errors


class TestFleetOptions(unittest.TestCase):

    def test_defaults(self):
        options = fleet_options.FleetOptions()
        self.assertEqual(options.test_name_prefix,
                         ios_constants.TEST_NAME_PREFIX)
        self.assertEqual(options.companion_runtime_pattern,
                         ios_constants.WATCHOS_RUNTIME_PATTERN)
        self.assertEqual(options.primary_runtime_pattern,
                         ios_constants.IOS_RUNTIME_PATTERN)

    def test_override(self):
        options = fleet_options.FleetOptions({
            'test_name_prefix': 'ci-pairing',
            'companion_device_type_pattern': r'Apple-Watch-Ultra',
        })
        self.assertEqual(options.test_name_prefix, 'ci-pairing')
        self.assertEqual(options.companion_device_type_pattern,
                         r'Apple-Watch-Ultra')
        self.assertEqual(options.AsDict()['primary_device_type_pattern'],
                         ios_constants.PRIMARY_DEVICE_TYPE_PATTERN)

    def test_unknown_option(self):
        with self.assertRaises(ios_errors.IllegalArgumentError):
            fleet_options.FleetOptions({'companion_pattern': 'Watch'})

    def test_non_string_option(self):
        with self.assertRaises(ios_errors.IllegalArgumentError):
            fleet_options.FleetOptions({'test_name_prefix': 3})

    def test_invalid_regular_expression(self):
        with self.assertRaises(ios_errors.IllegalArgumentError):
            fleet_options.FleetOptions({'primary_runtime_pattern': 'iOS-('})

    def test_options_not_object(self):
        with self.assertRaises(ios_errors.IllegalArgumentError):
            fleet_options.FleetOptions(['test_name_prefix'])

    def test_unknown_attribute(self):
        with self.assertRaises(AttributeError):
            fleet_options.FleetOptions().unknown_option


if __name__ == '__main__':
    unittest.main()
