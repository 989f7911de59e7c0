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

"""The helper class to delete unwanted simulators."""

import logging

from simfleet.shared import ios_constants
from simfleet.simulator_control import sim_inventory
from simfleet.simulator_control import simctl_invoker


def NamePrefixPredicate(prefix):
  """Gets a predicate matching the simulators whose name has the prefix."""
  def _Matches(instance):
    return instance.name.startswith(prefix)
  return _Matches


def MatchAll(unused_instance):
  return True


class FleetCleaner(object):
  """Deletes the simulators matching a predicate.

  The deletion is best effort. A failed deletion is logged and the sweep goes
  on with the next simulator.
  """

  def __init__(self, invoker):
    self._invoker = invoker

  def Sweep(self, inventory, name_predicate):
    """Deletes every simulator of the inventory matching the predicate.

    Args:
      inventory: sim_inventory.SimInventory, the snapshot to sweep.
      name_predicate: function, takes a sim_inventory.SimInstance and returns
        whether to delete it.

    Returns:
      a list of simctl_invoker.AttemptResult, one per matching simulator.
    """
    results = []
    for instance in inventory.AllInstances():
      if not name_predicate(instance):
        continue
      target = 'simulator %s (%s)' % (instance.name, instance.udid)
      result = simctl_invoker.RunAttempt(
          self._invoker, ios_constants.SimAction.DELETE, target,
          ['delete', instance.udid])
      if result.succeeded:
        logging.info('Deleted %s.', target)
      else:
        logging.warning('%s', result.error)
      results.append(result)
    return results

  def Clean(self, name_predicate, inventory=None):
    """Deletes the matching simulators and counts the deleted ones.

    Args:
      name_predicate: function, takes a sim_inventory.SimInstance and returns
        whether to delete it.
      inventory: sim_inventory.SimInventory, the snapshot to sweep. If it is
        not given, a fresh snapshot is fetched.

    Returns:
      int, the number of simulators actually deleted.

    Raises:
      ios_errors.MalformedInventoryError: the fresh snapshot can not be
          parsed.
    """
    if inventory is None:
      inventory = sim_inventory.FetchInventory(self._invoker)
    results = self.Sweep(inventory, name_predicate)
    return len([result for result in results if result.succeeded])
