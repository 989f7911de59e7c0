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

"""The options of the simulator fleet workflows."""

import re

from simfleet.shared import ios_constants
from simfleet.shared import ios_errors

_DEFAULT_OPTIONS = {
    'test_name_prefix': ios_constants.TEST_NAME_PREFIX,
    'companion_device_type_pattern':
        ios_constants.COMPANION_DEVICE_TYPE_PATTERN,
    'companion_runtime_pattern': ios_constants.WATCHOS_RUNTIME_PATTERN,
    'primary_device_type_pattern': ios_constants.PRIMARY_DEVICE_TYPE_PATTERN,
    'primary_runtime_pattern': ios_constants.IOS_RUNTIME_PATTERN,
    'ios_runtime_pattern': ios_constants.IOS_RUNTIME_PATTERN,
    'tvos_runtime_pattern': ios_constants.TVOS_RUNTIME_PATTERN,
    'watchos_runtime_pattern': ios_constants.WATCHOS_RUNTIME_PATTERN,
}


class FleetOptions(object):
  """Holds the name prefix and identifier patterns used by the workflows.

  Every option is readable as an attribute, e.g. options.test_name_prefix.
  """

  def __init__(self, options=None):
    """Initializes the options.

    Args:
      options: dict, overrides of the default options. The keys are described
        in ios_constants.OPTIONS_JSON_HELP.

    Raises:
      ios_errors.IllegalArgumentError: the options are not a dict, or an
          option is unknown, is not a string or is not a valid regular
          expression.
    """
    if options is not None and not isinstance(options, dict):
      raise ios_errors.IllegalArgumentError(
          'The options should be a json object, got %r.' % (options,))
    self._options = dict(_DEFAULT_OPTIONS)
    for key, value in (options or {}).items():
      if key not in _DEFAULT_OPTIONS:
        raise ios_errors.IllegalArgumentError(
            'The option %s is not supported. Supported options are %s.' %
            (key, sorted(_DEFAULT_OPTIONS)))
      if not isinstance(value, str) or not value:
        raise ios_errors.IllegalArgumentError(
            'The option %s should be a non-empty string, got %r.' %
            (key, value))
      if key.endswith('_pattern'):
        try:
          re.compile(value)
        except re.error as e:
          raise ios_errors.IllegalArgumentError(
              'The option %s is not a valid regular expression: %s' %
              (key, e))
      self._options[key] = value

  def __getattr__(self, name):
    try:
      return self.__dict__['_options'][name]
    except KeyError:
      raise AttributeError(name)

  def AsDict(self):
    return dict(self._options)
