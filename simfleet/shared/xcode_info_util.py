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

"""Utility methods for locating the tools of the selected Xcode."""

import logging
import os
import subprocess

from simfleet.shared import ios_constants
from simfleet.shared import ios_errors


def GetXcodeDeveloperPath():
  """Gets the active developer path of Xcode command line tools."""
  try:
    return subprocess.check_output(
        ('xcode-select', '-p'), encoding='utf-8').strip()
  except (OSError, subprocess.CalledProcessError) as e:
    raise ios_errors.ToolNotFoundError(
        'Failed to get the active developer path by xcode-select: %s' % e)


def FindXcodeRoot(start_path):
  """Finds the directory containing the Xcode marker file.

  Walks upward from start_path, the start_path itself included, until a
  directory containing version.plist is found.

  Args:
    start_path: string, the path to start the walk, e.g.
      /Applications/Xcode.app/Contents/Developer.

  Returns:
    string, the found directory, e.g. /Applications/Xcode.app/Contents.

  Raises:
    ios_errors.ToolNotFoundError: the filesystem root is reached without
        finding the marker file.
  """
  candidate = os.path.abspath(start_path)
  while True:
    if os.path.isfile(
        os.path.join(candidate, ios_constants.XCODE_ROOT_MARKER_FILE)):
      return candidate
    parent = os.path.dirname(candidate)
    if parent == candidate:
      raise ios_errors.ToolNotFoundError(
          'Can not find %s in %s or any of its parent directories.' %
          (ios_constants.XCODE_ROOT_MARKER_FILE, start_path))
    candidate = parent


def GetSimctlPath(xcode_path=None, select_query=GetXcodeDeveloperPath):
  """Gets the path of the simctl binary.

  If xcode_path is not given, the Xcode currently selected by xcode-select is
  used.

  Args:
    xcode_path: string, the path of Xcode.app, e.g. /Applications/Xcode.app.
    select_query: function, returns the active developer path. Only called
      when xcode_path is not given.

  Returns:
    string, the absolute path of simctl.

  Raises:
    ios_errors.ToolNotFoundError: simctl can not be located.
  """
  if xcode_path:
    start_path = os.path.join(xcode_path, ios_constants.XCODE_CONTENTS_DIR)
  else:
    start_path = select_query()
  xcode_root = FindXcodeRoot(start_path)
  simctl_path = os.path.join(xcode_root, ios_constants.SIMCTL_RELATIVE_PATH)
  if not (os.path.isfile(simctl_path) and os.access(simctl_path, os.X_OK)):
    raise ios_errors.ToolNotFoundError(
        'There is no executable simctl at %s.' % simctl_path)
  logging.debug('Found simctl at %s.', simctl_path)
  return simctl_path
