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

"""Resets the simulators of the host to one per device type and runtime."""

import logging
import re
import time

from simfleet.shared import fleet_options
from simfleet.shared import ios_constants
from simfleet.shared import run_report
from simfleet.simulator_control import fleet_cleaner
from simfleet.simulator_control import sim_inventory
from simfleet.simulator_control import simctl_invoker

RESET_COUNTERS = (
    'instances_deleted',
    'deletion_failures',
    'ios_created',
    'tvos_created',
    'watchos_created',
    'creation_failures',
)


class FleetResetter(object):
  """Deletes every simulator, then recreates the canonical set.

  There is no confirmation step here. All the simulators of the host are
  deleted, including the ones not created by simfleet.
  """

  def __init__(self, invoker, options=None, clock=time.time):
    """Constructor of FleetResetter object.

    Args:
      invoker: the object running simctl, e.g. simctl_invoker.SimctlInvoker.
      options: fleet_options.FleetOptions. By default, the default options.
      clock: function, returns the current time in seconds.
    """
    self._invoker = invoker
    self._options = options or fleet_options.FleetOptions()
    self._clock = clock
    self._cleaner = fleet_cleaner.FleetCleaner(invoker)
    self._os_counters = (
        (re.compile(self._options.ios_runtime_pattern), 'ios_created'),
        (re.compile(self._options.tvos_runtime_pattern), 'tvos_created'),
        (re.compile(self._options.watchos_runtime_pattern), 'watchos_created'),
    )

  def Reset(self):
    """Runs the reset.

    Returns:
      a run_report.RunReport of the reset.

    Raises:
      ios_errors.MalformedInventoryError: the simulator listing can not be
          parsed.
    """
    report = run_report.RunReport(RESET_COUNTERS, clock=self._clock)
    inventory = sim_inventory.FetchInventory(self._invoker)

    for result in self._cleaner.Sweep(inventory, fleet_cleaner.MatchAll):
      report.Increment('instances_deleted')
      if not result.succeeded:
        report.Increment('deletion_failures')

    runtimes = [runtime for runtime in inventory.runtimes
                if runtime.is_available]
    for device_type in inventory.device_types:
      for runtime in runtimes:
        self._Create(device_type, runtime, report)
    return report

  def _Create(self, device_type, runtime, report):
    name = '%s (%s)' % (device_type.name, runtime.name)
    target = 'simulator %s' % name
    result = simctl_invoker.RunAttempt(
        self._invoker, ios_constants.SimAction.CREATE, target,
        ['create', name, device_type.identifier, runtime.identifier])
    if not result.succeeded:
      report.Increment('creation_failures')
      logging.warning('%s', result.error)
      return
    logging.info('Created %s: %s.', target, result.output)
    for pattern, counter in self._os_counters:
      if pattern.search(runtime.identifier):
        report.Increment(counter)
        break
