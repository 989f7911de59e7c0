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

"""The class to run simctl commands."""

import collections
import logging
import subprocess

from simfleet.shared import ios_constants
from simfleet.shared import ios_errors

SimctlOutput = collections.namedtuple('SimctlOutput', ['exit_code', 'output'])

# The outcome of one simctl operation on a simulator. `error` is None when the
# operation succeeded, otherwise an ios_errors.SimError describing it.
AttemptResult = collections.namedtuple(
    'AttemptResult', ['action', 'target', 'succeeded', 'output', 'error'])

_ERROR_OF_ACTION = {
    ios_constants.SimAction.CREATE: ios_errors.CreationFailedError,
    ios_constants.SimAction.DELETE: ios_errors.DeletionFailedError,
    ios_constants.SimAction.PAIR: ios_errors.PairingFailedError,
    ios_constants.SimAction.UNPAIR: ios_errors.UnpairingFailedError,
}


class SimctlInvoker(object):
  """Runs the simctl binary synchronously.

  Other modules never start simctl by themselves. Anything providing the same
  Run method, such as the in-memory simctl of the tests, can replace it.
  """

  def __init__(self, simctl_path):
    """Constructor of SimctlInvoker object.

    Args:
      simctl_path: string, the absolute path of simctl.
    """
    self._simctl_path = simctl_path

  @property
  def simctl_path(self):
    return self._simctl_path

  def Run(self, args):
    """Runs simctl with the given arguments and waits for it to finish.

    The command is not retried when it fails. Bytes of the output which are
    not valid UTF-8 are replaced with U+FFFD.

    Args:
      args: list of string, the arguments passed to simctl, e.g.
        ['delete', udid].

    Returns:
      a SimctlOutput with the exit code and the stripped stdout.
    """
    command = [self._simctl_path] + list(args)
    logging.debug('Running command "%s"', ' '.join(command))
    process = subprocess.Popen(
        command,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        encoding='utf-8',
        errors='replace')
    stdout, stderr = process.communicate()
    if stderr.strip():
      logging.debug('simctl %s stderr: %s', args[0], stderr.strip())
    return SimctlOutput(process.returncode, stdout.strip())


def RunAttempt(invoker, action, target, args):
  """Runs one simctl operation and wraps its outcome in an AttemptResult.

  Args:
    invoker: the object running simctl, e.g. SimctlInvoker.
    action: ios_constants.SimAction, the kind of the operation.
    target: string, description of what the operation is applied to. It is
      used in log messages.
    args: list of string, the arguments passed to simctl.

  Returns:
    an AttemptResult.
  """
  exit_code, output = invoker.Run(args)
  if exit_code == 0:
    return AttemptResult(action, target, True, output, None)
  error = _ERROR_OF_ACTION[action](
      'Failed to %s %s (exit code %d): %s' %
      (action, target, exit_code, output))
  return AttemptResult(action, target, False, output, error)
