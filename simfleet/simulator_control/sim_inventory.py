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

"""The snapshot of the simulators, device types and runtimes on the host."""

import collections
import json
import re

from simfleet.shared import ios_constants
from simfleet.shared import ios_errors

DeviceType = collections.namedtuple('DeviceType', ['identifier', 'name'])
Runtime = collections.namedtuple(
    'Runtime', ['identifier', 'name', 'version', 'is_available'])
SimInstance = collections.namedtuple(
    'SimInstance', ['udid', 'name', 'runtime_key', 'state'])


class SimInventory(object):
  """The parsed output of `simctl list --json`.

  The snapshot is not updated by later simctl operations. Fetch a new one
  after creating or deleting simulators.
  """

  def __init__(self, device_types, runtimes, instances_by_runtime):
    """Constructor of SimInventory object.

    Args:
      device_types: list of DeviceType.
      runtimes: list of Runtime.
      instances_by_runtime: dict, maps the runtime key of the listing (the
        runtime identifier, or the runtime name in old Xcode) to the list of
        SimInstance of the runtime.
    """
    self._device_types = list(device_types)
    self._runtimes = list(runtimes)
    self._instances_by_runtime = collections.OrderedDict(instances_by_runtime)

  @property
  def device_types(self):
    return list(self._device_types)

  @property
  def runtimes(self):
    return list(self._runtimes)

  @property
  def instances_by_runtime(self):
    return collections.OrderedDict(
        (key, list(instances))
        for key, instances in self._instances_by_runtime.items())

  def AllInstances(self):
    """Gets all simulator instances, in listing order."""
    return [instance
            for instances in self._instances_by_runtime.values()
            for instance in instances]

  def InstancesWithNamePrefix(self, prefix):
    return [instance for instance in self.AllInstances()
            if instance.name.startswith(prefix)]

  def FilterDeviceTypes(self, pattern):
    """Gets the device types whose identifier matches the pattern.

    Args:
      pattern: string, regular expression searched in the identifier.

    Returns:
      a list of DeviceType, in listing order.
    """
    regex = re.compile(pattern)
    return [device_type for device_type in self._device_types
            if regex.search(device_type.identifier)]

  def FilterRuntimes(self, pattern, available_only=True):
    """Gets the runtimes whose identifier matches the pattern.

    Args:
      pattern: string, regular expression searched in the identifier.
      available_only: bool, whether to drop the unavailable runtimes.

    Returns:
      a list of Runtime, in listing order.
    """
    regex = re.compile(pattern)
    return [runtime for runtime in self._runtimes
            if regex.search(runtime.identifier) and
            (runtime.is_available or not available_only)]


def FetchInventory(invoker):
  """Lists the simulators of the host.

  Args:
    invoker: the object running simctl, e.g. simctl_invoker.SimctlInvoker.

  Returns:
    a SimInventory.

  Raises:
    ios_errors.MalformedInventoryError: the listing failed or its output can
        not be parsed.
  """
  exit_code, output = invoker.Run(['list', '--json'])
  if exit_code != 0:
    raise ios_errors.MalformedInventoryError(
        'Failed to list simulators (exit code %d): %s' % (exit_code, output))
  if '\ufffd' in output:
    raise ios_errors.MalformedInventoryError(
        'The simulator listing is not valid UTF-8: %s' % output)
  return ParseInventory(output)


def ParseInventory(list_json_output):
  """Parses the output of `simctl list --json`.

  Example output:
  {
    "devicetypes" : [
      {
        "name" : "iPhone 15",
        "identifier" : "com.apple.CoreSimulator.SimDeviceType.iPhone-15"
      }
    ],
    "runtimes" : [
      {
        "isAvailable" : true,
        "version" : "17.0",
        "identifier" : "com.apple.CoreSimulator.SimRuntime.iOS-17-0",
        "name" : "iOS 17.0"
      }
    ],
    "devices" : {
      "com.apple.CoreSimulator.SimRuntime.iOS-17-0" : [
        {
          "state" : "Shutdown",
          "name" : "iPhone 15",
          "udid" : "0A1B2C3D-0000-0000-0000-000000000000"
        }
      ]
    }
  }

  Args:
    list_json_output: string, the output of the listing.

  Returns:
    a SimInventory.

  Raises:
    ios_errors.MalformedInventoryError: the output is not the expected json.
  """
  try:
    root = json.loads(list_json_output)
  except ValueError as e:
    raise ios_errors.MalformedInventoryError(
        'The simulator listing is not valid json: %s' % e)
  if not isinstance(root, dict):
    raise ios_errors.MalformedInventoryError(
        'The simulator listing is not a json object.')
  try:
    device_types = [
        DeviceType(info['identifier'], info['name'])
        for info in _GetList(root, 'devicetypes')
    ]
    runtimes = [_ParseRuntime(info) for info in _GetList(root, 'runtimes')]
    devices = root.get('devices', {})
    if not isinstance(devices, dict):
      raise ios_errors.MalformedInventoryError(
          'The field "devices" should be a json object.')
    instances_by_runtime = collections.OrderedDict()
    for runtime_key, device_infos in devices.items():
      if not isinstance(device_infos, list):
        raise ios_errors.MalformedInventoryError(
            'The devices of runtime %s should be a json array.' % runtime_key)
      instances_by_runtime[runtime_key] = [
          SimInstance(info['udid'], info['name'], runtime_key,
                      info.get('state'))
          for info in device_infos
      ]
  except (KeyError, TypeError, AttributeError) as e:
    raise ios_errors.MalformedInventoryError(
        'Missing or invalid field in the simulator listing: %r' % e)
  return SimInventory(device_types, runtimes, instances_by_runtime)


def _GetList(root, key):
  value = root.get(key, [])
  if not isinstance(value, list):
    raise ios_errors.MalformedInventoryError(
        'The field "%s" should be a json array.' % key)
  return value


def _ParseRuntime(runtime_info):
  """Parses one runtime entry of the listing."""
  name = runtime_info['name']
  version = runtime_info.get('version')
  if not version:
    # Old listings only have the version inside the name, e.g. "iOS 9.3".
    version = name.split(' ', 1)[-1]
  return Runtime(runtime_info['identifier'], name, version,
                 IsRuntimeAvailable(runtime_info))


def IsRuntimeAvailable(runtime_info):
  """Checks the availability of a runtime entry of the listing.

  The current listing has the field `isAvailable`, which is a bool or "YES"
  /"NO". Old listings have the text field `availability`, e.g. "(available)"
  or "(unavailable, runtime profile not found)". A runtime is available unless
  one of the fields says otherwise.

  Args:
    runtime_info: dict, the runtime entry.

  Returns:
    True if the runtime is available.
  """
  if 'availability' in runtime_info:
    availability = str(runtime_info['availability'])
    if (availability.find('unavailable') >= 0 or
        availability.find(ios_constants.RUNTIME_AVAILABLE_MARKER) < 0):
      return False
  if 'isAvailable' in runtime_info:
    is_available = runtime_info['isAvailable']
    if isinstance(is_available, str):
      return is_available.strip().lower() in ('yes', 'true', '1')
    return bool(is_available)
  return True
