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

"""The exit codes of fleet runner."""


def enum(**enums):
  return type('Enum', (), enums)

EXITCODE = enum(
    SUCCEEDED=0,
    ERROR=1,
    TOOL_NOT_FOUND=20,
    MALFORMED_INVENTORY=21,
    NOT_CONFIRMED=22)

EXITCODE_INFOS = {
    EXITCODE.SUCCEEDED: 'Run succeeded',
    EXITCODE.ERROR: 'General error',
    EXITCODE.TOOL_NOT_FOUND: 'Can not locate simctl of the selected Xcode',
    EXITCODE.MALFORMED_INVENTORY: 'Can not parse the simulator listing',
    EXITCODE.NOT_CONFIRMED: 'The destructive operation was not confirmed'}
