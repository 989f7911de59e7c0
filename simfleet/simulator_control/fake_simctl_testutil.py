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

"""An in-memory simctl for testing the fleet workflows. Only tests import it."""

import collections
import json

from simfleet.simulator_control import simctl_invoker


def DeviceTypeInfo(identifier_suffix, name):
  return {
      'identifier':
          'com.apple.CoreSimulator.SimDeviceType.' + identifier_suffix,
      'name': name,
  }


def RuntimeInfo(os_type, version, is_available=True):
  """Gets a runtime entry in the current listing format."""
  return {
      'identifier': 'com.apple.CoreSimulator.SimRuntime.%s-%s' %
                    (os_type, version.replace('.', '-')),
      'name': '%s %s' % (os_type, version),
      'version': version,
      'isAvailable': is_available,
  }


class FakeSimctlInvoker(object):
  """Keeps a simulator inventory in memory and serves simctl commands on it.

  Supports `list --json`, `create`, `delete`, `pair` and `unpair`. Every call
  is recorded in `calls`.
  """

  def __init__(self, device_types=None, runtimes=None, devices=None,
               pair_policy=None):
    """Constructor of FakeSimctlInvoker object.

    Args:
      device_types: list of dict, the `devicetypes` entries of the listing.
      runtimes: list of dict, the `runtimes` entries of the listing.
      devices: dict, the `devices` entries of the listing, maps runtime
        identifier to list of dict with keys udid, name and state.
      pair_policy: function, takes the companion and the primary device dicts
        and returns whether pairing them succeeds. By default, it always
        succeeds.
    """
    self.device_types = list(device_types or [])
    self.runtimes = list(runtimes or [])
    self.devices = collections.OrderedDict()
    for runtime_key, infos in (devices or {}).items():
      self.devices[runtime_key] = [dict(info) for info in infos]
    self.pairs = collections.OrderedDict()
    self.pair_policy = pair_policy or (lambda companion, primary: True)
    self.calls = []
    # Combinations of (device type identifier, runtime identifier) whose
    # creation fails.
    self.failing_creations = set()
    # Maps udid to the number of deletions of it that still fail.
    self.failing_deletions = collections.Counter()
    self.list_output = None
    self._next_id = 0

  def Run(self, args):
    self.calls.append(list(args))
    command = args[0]
    if command == 'list':
      return self._List()
    if command == 'create':
      return self._Create(*args[1:])
    if command == 'delete':
      return self._Delete(args[1])
    if command == 'pair':
      return self._Pair(args[1], args[2])
    if command == 'unpair':
      return self._Unpair(args[1])
    return simctl_invoker.SimctlOutput(
        1, 'Unrecognized subcommand: %s' % command)

  def CallsOf(self, command):
    return [call for call in self.calls if call[0] == command]

  def AllDevices(self):
    return [device for infos in self.devices.values() for device in infos]

  def _NewId(self, prefix):
    self._next_id += 1
    return '%s-%08d' % (prefix, self._next_id)

  def _FindDevice(self, udid):
    for device in self.AllDevices():
      if device['udid'] == udid:
        return device
    return None

  def _List(self):
    if self.list_output is not None:
      return simctl_invoker.SimctlOutput(0, self.list_output)
    return simctl_invoker.SimctlOutput(0, json.dumps({
        'devicetypes': self.device_types,
        'runtimes': self.runtimes,
        'devices': self.devices,
    }))

  def _Create(self, name, device_type_id, runtime_id):
    if (device_type_id, runtime_id) in self.failing_creations:
      return simctl_invoker.SimctlOutput(
          1, 'An error was encountered processing the command.')
    if device_type_id not in [info['identifier'] for info in self.device_types]:
      return simctl_invoker.SimctlOutput(
          1, 'Invalid device type: %s' % device_type_id)
    if runtime_id not in [info['identifier'] for info in self.runtimes]:
      return simctl_invoker.SimctlOutput(
          1, 'Invalid runtime: %s' % runtime_id)
    udid = self._NewId('FAKE-UDID')
    self.devices.setdefault(runtime_id, []).append({
        'udid': udid,
        'name': name,
        'state': 'Shutdown',
        'deviceTypeIdentifier': device_type_id,
        'runtimeIdentifier': runtime_id,
    })
    return simctl_invoker.SimctlOutput(0, udid)

  def _Delete(self, udid):
    if self.failing_deletions[udid] > 0:
      self.failing_deletions[udid] -= 1
      return simctl_invoker.SimctlOutput(
          1, 'Unable to delete device: %s' % udid)
    for infos in self.devices.values():
      for device in infos:
        if device['udid'] == udid:
          infos.remove(device)
          for handle, pair in list(self.pairs.items()):
            if udid in pair:
              del self.pairs[handle]
          return simctl_invoker.SimctlOutput(0, '')
    return simctl_invoker.SimctlOutput(1, 'Invalid device: %s' % udid)

  def _Pair(self, companion_udid, primary_udid):
    companion = self._FindDevice(companion_udid)
    primary = self._FindDevice(primary_udid)
    if companion is None or primary is None:
      return simctl_invoker.SimctlOutput(1, 'Invalid device.')
    if not self.pair_policy(companion, primary):
      return simctl_invoker.SimctlOutput(
          1, 'Unable to pair %s with %s.' % (companion_udid, primary_udid))
    handle = self._NewId('FAKE-PAIR')
    self.pairs[handle] = (companion_udid, primary_udid)
    return simctl_invoker.SimctlOutput(0, handle)

  def _Unpair(self, handle):
    if handle not in self.pairs:
      return simctl_invoker.SimctlOutput(1, 'Invalid pair: %s' % handle)
    del self.pairs[handle]
    return simctl_invoker.SimctlOutput(0, '')
