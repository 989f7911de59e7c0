#!/usr/bin/env python3
"""
Unit tests for pairing_matrix.py using the in-memory simctl.
"""

import collections
import unittest
from unittest import mock

from simfleet.shared import fleet_options
from simfleet.shared import ios_errors
from simfleet.simulator_control import fake_simctl_testutil as fake_simctl
from simfleet.simulator_control import pairing_matrix
from simfleet.simulator_control import simctl_invoker

_WATCH_SERIES_7 = fake_simctl.DeviceTypeInfo(
    'Apple-Watch-Series-7-45mm', 'Apple Watch Series 7 - 45mm')
_WATCH_SERIES_8 = fake_simctl.DeviceTypeInfo(
    'Apple-Watch-Series-8-41mm', 'Apple Watch Series 8 - 41mm')
_WATCH_38MM = fake_simctl.DeviceTypeInfo(
    'Apple-Watch-38mm', 'Apple Watch - 38mm')
_IPHONE_15 = fake_simctl.DeviceTypeInfo('iPhone-15', 'iPhone 15')
_IPHONE_14 = fake_simctl.DeviceTypeInfo('iPhone-14', 'iPhone 14')
_IPAD_AIR = fake_simctl.DeviceTypeInfo('iPad-Air', 'iPad Air')

_WATCHOS_10 = fake_simctl.RuntimeInfo('watchOS', '10.0')
_WATCHOS_9_4 = fake_simctl.RuntimeInfo('watchOS', '9.4')
_IOS_17 = fake_simctl.RuntimeInfo('iOS', '17.0')
_IOS_16_4 = fake_simctl.RuntimeInfo('iOS', '16.4')
_TVOS_17 = fake_simctl.RuntimeInfo('tvOS', '17.0')


def _Build(invoker, options=None):
    builder = pairing_matrix.PairingMatrixBuilder(
        invoker, options=options, clock=mock.Mock(return_value=0.0))
    return builder.Build()


def _TestInstances(invoker, prefix='simfleet-test'):
    return [device for device in invoker.AllDevices()
            if device['name'].startswith(prefix)]


class TestCompatibilityMatrix(unittest.TestCase):

    def test_sorted_without_duplicates(self):
        matrix = pairing_matrix.CompatibilityMatrix()
        matrix.Record('17.0', '10.0')
        matrix.Record('16.4', '9.4')
        matrix.Record('17.0', '9.4')
        matrix.Record('17.0', '10.0')

        self.assertEqual(
            matrix.Sorted(),
            collections.OrderedDict([('16.4', ['9.4']),
                                     ('17.0', ['10.0', '9.4'])]))
        self.assertEqual(list(matrix.Sorted()), ['16.4', '17.0'])

    def test_empty(self):
        self.assertEqual(pairing_matrix.CompatibilityMatrix().Sorted(), {})


class TestSinglePairing(unittest.TestCase):
    """One companion type/runtime and one primary type/runtime."""

    def setUp(self):
        self.invoker = fake_simctl.FakeSimctlInvoker(
            device_types=[_WATCH_SERIES_7, _IPHONE_15],
            runtimes=[_WATCHOS_10, _IOS_17])

    def test_counters_and_matrix(self):
        result = _Build(self.invoker)

        self.assertEqual(result.report.Get('companions_created'), 1)
        self.assertEqual(result.report.Get('primaries_created'), 1)
        self.assertEqual(result.report.Get('pairing_attempts'), 1)
        self.assertEqual(result.report.Get('pairing_successes'), 1)
        self.assertEqual(result.matrix, {'17.0': ['10.0']})

    def test_command_sequence(self):
        _Build(self.invoker)

        self.assertEqual(self.invoker.calls, [
            ['list', '--json'],
            ['create', 'simfleet-test-companion-1',
             _WATCH_SERIES_7['identifier'], _WATCHOS_10['identifier']],
            ['create', 'simfleet-test-primary',
             _IPHONE_15['identifier'], _IOS_17['identifier']],
            ['pair', 'FAKE-UDID-00000001', 'FAKE-UDID-00000002'],
            ['unpair', 'FAKE-PAIR-00000003'],
            ['delete', 'FAKE-UDID-00000002'],
            ['delete', 'FAKE-UDID-00000001'],
            ['list', '--json'],
        ])

    def test_no_test_instance_left(self):
        result = _Build(self.invoker)

        self.assertEqual(_TestInstances(self.invoker), [])
        self.assertEqual(self.invoker.pairs, {})
        self.assertEqual(result.report.Get('stale_instances_removed'), 0)

    def test_custom_prefix(self):
        options = fleet_options.FleetOptions({'test_name_prefix': 'ci-pair'})

        _Build(self.invoker, options=options)

        names = [call[1] for call in self.invoker.CallsOf('create')]
        self.assertEqual(names, ['ci-pair-companion-1', 'ci-pair-primary'])

    def test_attempts_are_recorded(self):
        result = _Build(self.invoker)

        self.assertEqual([attempt.action for attempt in result.attempts],
                         ['create', 'create', 'pair', 'unpair', 'delete',
                          'delete'])
        self.assertTrue(all(attempt.succeeded for attempt in result.attempts))


class TestPairingMatrix(unittest.TestCase):
    """Two companion types x two watchOS, two primary types x two iOS."""

    def setUp(self):
        self.invoker = fake_simctl.FakeSimctlInvoker(
            device_types=[_IPHONE_15, _WATCH_SERIES_7, _IPAD_AIR,
                          _WATCH_SERIES_8, _WATCH_38MM, _IPHONE_14],
            runtimes=[_IOS_17, _WATCHOS_10, _TVOS_17, _IOS_16_4,
                      _WATCHOS_9_4])

    def test_every_combination_is_paired(self):
        result = _Build(self.invoker)

        self.assertEqual(result.report.Get('companions_created'), 4)
        self.assertEqual(result.report.Get('primaries_created'), 4)
        self.assertEqual(result.report.Get('pairing_attempts'), 16)
        self.assertEqual(result.report.Get('pairing_successes'), 16)
        self.assertEqual(
            result.matrix,
            collections.OrderedDict([('16.4', ['10.0', '9.4']),
                                     ('17.0', ['10.0', '9.4'])]))

    def test_matrix_is_sorted_and_unique(self):
        result = _Build(self.invoker)

        keys = list(result.matrix)
        self.assertEqual(keys, sorted(keys))
        for versions in result.matrix.values():
            self.assertTrue(all(
                versions[i] < versions[i + 1]
                for i in range(len(versions) - 1)))

    def test_companion_names_are_unique(self):
        _Build(self.invoker)

        names = [call[1] for call in self.invoker.CallsOf('create')]
        companion_names = [name for name in names if 'companion' in name]
        self.assertEqual(companion_names, [
            'simfleet-test-companion-1', 'simfleet-test-companion-2',
            'simfleet-test-companion-3', 'simfleet-test-companion-4'])
        self.assertEqual(
            [name for name in names if 'companion' not in name],
            ['simfleet-test-primary'] * 4)

    def test_failed_pairings_are_not_recorded(self):
        def _Policy(companion, primary):
            return not (
                companion['runtimeIdentifier'] == _WATCHOS_10['identifier'] and
                primary['runtimeIdentifier'] == _IOS_16_4['identifier'])
        self.invoker.pair_policy = _Policy

        result = _Build(self.invoker)

        self.assertEqual(result.report.Get('pairing_attempts'), 16)
        self.assertEqual(result.report.Get('pairing_successes'), 12)
        self.assertEqual(result.matrix, {'16.4': ['9.4'],
                                         '17.0': ['10.0', '9.4']})
        self.assertEqual(len(self.invoker.CallsOf('unpair')), 12)

    def test_failed_companion_creation_is_skipped(self):
        self.invoker.failing_creations.add(
            (_WATCH_SERIES_8['identifier'], _WATCHOS_10['identifier']))

        result = _Build(self.invoker)

        self.assertEqual(result.report.Get('companions_created'), 3)
        self.assertEqual(result.report.Get('creation_failures'), 1)
        self.assertEqual(result.report.Get('pairing_attempts'), 12)
        self.assertEqual(result.report.Get('pairing_successes'), 12)
        self.assertEqual(result.matrix, {'16.4': ['10.0', '9.4'],
                                         '17.0': ['10.0', '9.4']})
        self.assertEqual(_TestInstances(self.invoker), [])

    def test_failed_primary_creation_is_skipped(self):
        self.invoker.failing_creations.add(
            (_IPHONE_14['identifier'], _IOS_16_4['identifier']))

        result = _Build(self.invoker)

        self.assertEqual(result.report.Get('primaries_created'), 3)
        self.assertEqual(result.report.Get('pairing_attempts'), 12)
        self.assertEqual(result.matrix, {'16.4': ['10.0', '9.4'],
                                         '17.0': ['10.0', '9.4']})

    def test_unavailable_runtime_is_not_used(self):
        self.invoker.runtimes = [
            _IOS_17, _WATCHOS_10,
            fake_simctl.RuntimeInfo('watchOS', '9.4', is_available=False)]

        result = _Build(self.invoker)

        self.assertEqual(result.report.Get('companions_created'), 2)
        self.assertEqual(result.matrix, {'17.0': ['10.0']})


class TestPairingCleanup(unittest.TestCase):

    def setUp(self):
        self.invoker = fake_simctl.FakeSimctlInvoker(
            device_types=[_WATCH_SERIES_7, _IPHONE_15],
            runtimes=[_WATCHOS_10, _IOS_17],
            devices={_WATCHOS_10['identifier']: [
                {'udid': 'STALE-1', 'name': 'simfleet-test-companion-7',
                 'state': 'Shutdown'},
                {'udid': 'KEEP-1', 'name': 'My Watch', 'state': 'Shutdown'},
            ]})

    def test_stale_instances_are_removed_first(self):
        result = _Build(self.invoker)

        self.assertEqual(self.invoker.calls[1], ['delete', 'STALE-1'])
        self.assertEqual(result.report.Get('stale_instances_removed'), 1)
        self.assertEqual(
            [device['udid'] for device in self.invoker.AllDevices()],
            ['KEEP-1'])

    def test_failed_primary_deletion_is_swept(self):
        """Test a primary whose deletion failed is removed by the final sweep."""
        self.invoker.failing_deletions['FAKE-UDID-00000002'] = 1

        result = _Build(self.invoker)

        self.assertEqual(result.report.Get('deletion_failures'), 1)
        self.assertEqual(result.report.Get('stale_instances_removed'), 2)
        self.assertEqual(result.matrix, {'17.0': ['10.0']})
        self.assertEqual(_TestInstances(self.invoker), [])

    def test_failed_unpairing_is_counted(self):
        with mock.patch.object(
            self.invoker, '_Unpair',
            return_value=simctl_invoker.SimctlOutput(1, 'Invalid pair')):
            result = _Build(self.invoker)

        self.assertEqual(result.report.Get('pairing_successes'), 1)
        self.assertEqual(result.report.Get('unpairing_failures'), 1)
        self.assertEqual(self.invoker.pairs, {})
        self.assertEqual(_TestInstances(self.invoker), [])

    def test_created_instances_deleted_when_simctl_raises(self):
        """Test the companion and the primary are deleted when pair raises."""
        with mock.patch.object(self.invoker, '_Pair',
                               side_effect=OSError('simctl crashed')):
            with self.assertRaises(OSError):
                _Build(self.invoker)

        self.assertEqual(_TestInstances(self.invoker), [])
        self.assertEqual(self.invoker.CallsOf('delete'), [
            ['delete', 'STALE-1'],
            ['delete', 'FAKE-UDID-00000001'],
            ['delete', 'FAKE-UDID-00000002'],
        ])
        self.assertEqual(self.invoker.calls[-1], ['list', '--json'])

    def test_creation_without_udid_is_a_failure(self):
        with mock.patch.object(self.invoker, '_Create',
                               return_value=simctl_invoker.SimctlOutput(0, '')):
            result = _Build(self.invoker)

        self.assertEqual(result.report.Get('companions_created'), 0)
        self.assertEqual(result.report.Get('primaries_created'), 0)
        self.assertEqual(result.report.Get('creation_failures'), 2)
        creations = [attempt for attempt in result.attempts
                     if attempt.action == 'create']
        self.assertFalse(any(attempt.succeeded for attempt in creations))
        self.assertIsInstance(creations[0].error,
                              ios_errors.CreationFailedError)

    def test_pairing_without_handle_is_not_unpaired(self):
        with mock.patch.object(self.invoker, '_Pair',
                               return_value=simctl_invoker.SimctlOutput(0, '')):
            result = _Build(self.invoker)

        self.assertEqual(result.report.Get('pairing_successes'), 1)
        self.assertEqual(result.report.Get('unpairing_failures'), 1)
        self.assertEqual(self.invoker.CallsOf('unpair'), [])
        self.assertEqual(result.matrix, {'17.0': ['10.0']})
        self.assertEqual(_TestInstances(self.invoker), [])


class TestPairingInventoryErrors(unittest.TestCase):

    def test_malformed_initial_inventory(self):
        invoker = fake_simctl.FakeSimctlInvoker()
        invoker.list_output = 'No devices.'

        with self.assertRaises(ios_errors.MalformedInventoryError):
            _Build(invoker)
        self.assertEqual(invoker.calls, [['list', '--json']])

    def test_nothing_to_pair(self):
        invoker = fake_simctl.FakeSimctlInvoker(
            device_types=[_IPHONE_15], runtimes=[_IOS_17])

        result = _Build(invoker)

        self.assertEqual(result.matrix, {})
        self.assertEqual(result.report.Get('primaries_created'), 1)
        self.assertEqual(result.report.Get('pairing_attempts'), 0)
        self.assertEqual(_TestInstances(invoker), [])


if __name__ == '__main__':
    unittest.main()
