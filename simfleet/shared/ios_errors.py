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

"""The errors of simulator fleet management."""


class Error(Exception):
  """General error of simfleet."""


class IllegalArgumentError(Error):
  """Invalid argument or options file."""


class ToolNotFoundError(Error):
  """The simctl binary of the selected Xcode can not be located."""


class MalformedInventoryError(Error):
  """The output of `simctl list --json` can not be parsed."""


class SimError(Error):
  """A single simctl operation on a simulator failed.

  The subclasses are not raised by the fleet workflows. They are attached to
  the attempt results so that the failure is logged and counted while the
  rest of the sweep continues.
  """


class CreationFailedError(SimError):
  pass


class DeletionFailedError(SimError):
  pass


class PairingFailedError(SimError):
  pass


class UnpairingFailedError(SimError):
  pass
