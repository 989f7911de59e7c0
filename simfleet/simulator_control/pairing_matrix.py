# Copyright 2017 Google Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Builds the watch/phone runtime pairing compatibility matrix.

Every companion (watch) device type and runtime combination is created once,
then every primary (phone) device type and runtime combination is created in
turn and paired with all the companions. The runtime versions of the
successful pairs make up the matrix. All the simulators created here are
named with the test name prefix and are deleted before the build returns.
"""

import collections
import logging
import time

from simfleet.shared import fleet_options
from simfleet.shared import ios_constants
from simfleet.shared import ios_errors
from simfleet.shared import run_report
from simfleet.simulator_control import fleet_cleaner
from simfleet.simulator_control import sim_inventory
from simfleet.simulator_control import simctl_invoker

PAIRING_COUNTERS = (
    'companions_created',
    'primaries_created',
    'pairing_attempts',
    'pairing_successes',
    'creation_failures',
    'unpairing_failures',
    'deletion_failures',
    'stale_instances_removed',
)

Companion = collections.namedtuple(
    'Companion', ['udid', 'name', 'device_type', 'runtime'])

PairingResult = collections.namedtuple(
    'PairingResult', ['matrix', 'report', 'attempts'])


class CompatibilityMatrix(object):
  """Maps primary runtime versions to the companion versions paired with."""

  def __init__(self):
    self._versions = {}

  def Record(self, primary_version, companion_version):
    self._versions.setdefault(primary_version, set()).add(companion_version)

  def Sorted(self):
    """Gets the matrix with the keys and each list of versions ascending.

    Returns:
      a collections.OrderedDict, maps the primary runtime version to the sorted
      list of companion runtime versions. E.g. {"17.0": ["10.0", "9.4"]}. The
      versions are compared as strings.
    """
    return collections.OrderedDict(
        (primary_version, sorted(self._versions[primary_version]))
        for primary_version in sorted(self._versions))


class PairingMatrixBuilder(object):
  """Creates, pairs and deletes test simulators to discover compatibility."""

  def __init__(self, invoker, options=None, clock=time.time):
    """Constructor of PairingMatrixBuilder object.

    Args:
      invoker: the object running simctl, e.g. simctl_invoker.SimctlInvoker.
      options: fleet_options.FleetOptions. By default, the default options.
      clock: function, returns the current time in seconds.
    """
    self._invoker = invoker
    self._options = options or fleet_options.FleetOptions()
    self._clock = clock
    self._cleaner = fleet_cleaner.FleetCleaner(invoker)
    self._live_instances = collections.OrderedDict()

  def Build(self):
    """Runs all the pairing attempts.

    A failed creation, pairing, unpairing or deletion is logged and counted,
    but does not stop the build. The created simulators are deleted and the
    leftover test simulators are swept even when the build raises.

    Returns:
      a PairingResult with the sorted matrix, the run_report.RunReport and the
      list of simctl_invoker.AttemptResult of every operation.

    Raises:
      ios_errors.MalformedInventoryError: the simulator listing before or
          after the build can not be parsed.
    """
    report = run_report.RunReport(PAIRING_COUNTERS, clock=self._clock)
    matrix = CompatibilityMatrix()
    attempts = []
    is_test_instance = fleet_cleaner.NamePrefixPredicate(
        self._options.test_name_prefix)

    inventory = sim_inventory.FetchInventory(self._invoker)
    self._SweepTestInstances(inventory, is_test_instance, report, attempts)

    # Maps the udid of every simulator created here and not deleted yet to
    # its name.
    self._live_instances = collections.OrderedDict()
    try:
      companion_types = inventory.FilterDeviceTypes(
          self._options.companion_device_type_pattern)
      companion_runtimes = inventory.FilterRuntimes(
          self._options.companion_runtime_pattern)
      primary_types = inventory.FilterDeviceTypes(
          self._options.primary_device_type_pattern)
      primary_runtimes = inventory.FilterRuntimes(
          self._options.primary_runtime_pattern)
      logging.info(
          'Found %d companion device types, %d companion runtimes, %d primary '
          'device types and %d primary runtimes.', len(companion_types),
          len(companion_runtimes), len(primary_types), len(primary_runtimes))

      companions = self._CreateCompanions(
          companion_types, companion_runtimes, report, attempts)
      for primary_type in primary_types:
        for primary_runtime in primary_runtimes:
          self._PairWithPrimary(primary_type, primary_runtime, companions,
                                matrix, report, attempts)
    finally:
      # Deletes the simulators created here even when simctl raises or the
      # run is interrupted.
      for udid, name in list(self._live_instances.items()):
        self._Delete(udid, name, report, attempts)
      inventory = sim_inventory.FetchInventory(self._invoker)
      self._SweepTestInstances(inventory, is_test_instance, report, attempts)
    return PairingResult(matrix.Sorted(), report, attempts)

  def _SweepTestInstances(self, inventory, is_test_instance, report, attempts):
    results = self._cleaner.Sweep(inventory, is_test_instance)
    attempts.extend(results)
    for result in results:
      if result.succeeded:
        report.Increment('stale_instances_removed')
      else:
        report.Increment('deletion_failures')

  def _CreateCompanions(self, device_types, runtimes, report, attempts):
    """Creates one companion per device type and runtime combination.

    Returns:
      a list of Companion, the successfully created ones.
    """
    companions = []
    index = 0
    for device_type in device_types:
      for runtime in runtimes:
        index += 1
        name = '%s-companion-%d' % (self._options.test_name_prefix, index)
        udid = self._Create(name, device_type, runtime, report, attempts)
        if udid:
          report.Increment('companions_created')
          companions.append(Companion(udid, name, device_type, runtime))
    return companions

  def _PairWithPrimary(self, device_type, runtime, companions, matrix, report,
                       attempts):
    """Creates a primary simulator and pairs every companion with it."""
    # All primaries share one name. Only one of them exists at a time.
    name = '%s-primary' % self._options.test_name_prefix
    primary_udid = self._Create(name, device_type, runtime, report, attempts)
    if not primary_udid:
      return
    report.Increment('primaries_created')
    for companion in companions:
      report.Increment('pairing_attempts')
      target = '%s (%s) with %s (%s)' % (
          companion.device_type.name, companion.runtime.name,
          device_type.name, runtime.name)
      logging.info('Pairing %s.', target)
      pair_result = simctl_invoker.RunAttempt(
          self._invoker, ios_constants.SimAction.PAIR, target,
          ['pair', companion.udid, primary_udid])
      attempts.append(pair_result)
      if not pair_result.succeeded:
        logging.info('Failed to pair %s.', target)
        logging.debug('%s', pair_result.error)
        continue
      report.Increment('pairing_successes')
      matrix.Record(runtime.version, companion.runtime.version)
      logging.info('Paired %s.', target)

      pair_handle = pair_result.output
      if not pair_handle:
        report.Increment('unpairing_failures')
        logging.warning('simctl printed no pair handle for %s, can not '
                        'unpair it.', target)
        continue
      unpair_result = simctl_invoker.RunAttempt(
          self._invoker, ios_constants.SimAction.UNPAIR,
          'pair %s' % pair_handle, ['unpair', pair_handle])
      attempts.append(unpair_result)
      if not unpair_result.succeeded:
        report.Increment('unpairing_failures')
        logging.warning('%s', unpair_result.error)
    self._Delete(primary_udid, name, report, attempts)

  def _Create(self, name, device_type, runtime, report, attempts):
    """Creates a simulator.

    Returns:
      string, the udid of the new simulator, or None if the creation failed.
    """
    target = 'simulator %s (%s, %s)' % (name, device_type.name, runtime.name)
    result = simctl_invoker.RunAttempt(
        self._invoker, ios_constants.SimAction.CREATE, target,
        ['create', name, device_type.identifier, runtime.identifier])
    if result.succeeded and not result.output:
      result = result._replace(
          succeeded=False,
          error=ios_errors.CreationFailedError(
              'simctl printed no udid after creating %s.' % target))
    attempts.append(result)
    if not result.succeeded:
      report.Increment('creation_failures')
      logging.warning('%s', result.error)
      return None
    logging.info('Created %s: %s.', target, result.output)
    self._live_instances[result.output] = name
    return result.output

  def _Delete(self, udid, name, report, attempts):
    self._live_instances.pop(udid, None)
    target = 'simulator %s (%s)' % (name, udid)
    result = simctl_invoker.RunAttempt(
        self._invoker, ios_constants.SimAction.DELETE, target,
        ['delete', udid])
    attempts.append(result)
    if result.succeeded:
      logging.info('Deleted %s.', target)
    else:
      report.Increment('deletion_failures')
      logging.warning('%s', result.error)
