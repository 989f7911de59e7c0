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

"""The class contains the constants of simulator fleet management."""


def enum(**enums):
  return type('Enum', (), enums)


SimAction = enum(CREATE='create', DELETE='delete', PAIR='pair',
                 UNPAIR='unpair')

# Xcode.app/Contents contains version.plist. simctl lives under
# Xcode.app/Contents/Developer.
XCODE_CONTENTS_DIR = 'Contents'
XCODE_ROOT_MARKER_FILE = 'version.plist'
SIMCTL_RELATIVE_PATH = 'Developer/usr/bin/simctl'

# Every instance created by the pairing matrix builder has a name starting
# with this prefix, so leftovers of a crashed run can be recognized.
TEST_NAME_PREFIX = 'simfleet-test'

# The patterns are searched in the identifiers of `simctl list --json`, e.g.
# com.apple.CoreSimulator.SimDeviceType.Apple-Watch-Series-7-45mm
# com.apple.CoreSimulator.SimRuntime.watchOS-8-0
COMPANION_DEVICE_TYPE_PATTERN = r'\.Apple-Watch-Series-\d+-4[1-5]mm$'
PRIMARY_DEVICE_TYPE_PATTERN = r'\.iPhone-'
IOS_RUNTIME_PATTERN = r'\.iOS-'
WATCHOS_RUNTIME_PATTERN = r'\.watchOS-'
TVOS_RUNTIME_PATTERN = r'\.tvOS-'

RUNTIME_AVAILABLE_MARKER = '(available)'

OPTIONS_JSON_HELP = (
    """The path of json file, which contains options of the fleet workflows.

Available keys for the json:
  test_name_prefix : string
    The name prefix of the simulators created by pair_matrix. Leftover
    simulators with this prefix are deleted before and after the run.
    By default, it is "%s".
  companion_device_type_pattern : string
    Regular expression searched in the companion (watch) device type
    identifiers.
  companion_runtime_pattern : string
    Regular expression searched in the companion runtime identifiers. By
    default, it matches watchOS runtimes.
  primary_device_type_pattern : string
    Regular expression searched in the primary (phone) device type
    identifiers.
  primary_runtime_pattern : string
    Regular expression searched in the primary runtime identifiers. By
    default, it matches iOS runtimes.
  ios_runtime_pattern, tvos_runtime_pattern, watchos_runtime_pattern : string
    Regular expressions used by reset to count the created simulators per OS.
  """ % TEST_NAME_PREFIX)
