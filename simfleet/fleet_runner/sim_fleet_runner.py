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

"""Script used to manage the simulators of the host with simctl.

It can build the watch/phone pairing compatibility matrix of the installed
runtimes, reset the host to one simulator per device type and runtime, and
delete the simulators left over by an interrupted pairing run.
"""

import argparse
import collections
import json
import logging
import sys

from simfleet.fleet_runner import runner_exit_codes
from simfleet.shared import fleet_options
from simfleet.shared import ios_constants
from simfleet.shared import ios_errors
from simfleet.shared import xcode_info_util
from simfleet.simulator_control import fleet_cleaner
from simfleet.simulator_control import fleet_resetter
from simfleet.simulator_control import pairing_matrix
from simfleet.simulator_control import sim_inventory
from simfleet.simulator_control import simctl_invoker


def _AddGeneralArguments(parser):
  """Adds general arguments to the parser."""
  parser.add_argument('-v', '--verbose', help='Increase output verbosity.',
                      action='store_true')
  parser.add_argument(
      '--xcode_path',
      help='The path of Xcode.app whose simctl is used, e.g. '
           '/Applications/Xcode.app. By default, it is the Xcode selected by '
           '`xcode-select`.')
  parser.add_argument(
      '--options_json_path',
      help=ios_constants.OPTIONS_JSON_HELP)


def _AddPairMatrixSubParser(subparsers):
  """Adds sub parser for sub command `pair_matrix`."""
  def _PairMatrix(args):
    """The function of sub command `pair_matrix`."""
    builder = pairing_matrix.PairingMatrixBuilder(
        _CreateInvoker(args), options=_GetOptions(args))
    result = builder.Build()
    print(json.dumps(result.matrix, indent=2))
    print(result.report.Render())
    if args.output_json_path:
      _WriteJson(args.output_json_path, collections.OrderedDict([
          ('compatibility', result.matrix),
          ('statistics', result.report.AsDict())]))
    return runner_exit_codes.EXITCODE.SUCCEEDED

  pair_parser = subparsers.add_parser(
      'pair_matrix',
      help='Pair every watch simulator with every phone simulator of the '
           'installed runtimes and print which runtime versions can be '
           'paired. The created simulators are deleted afterwards.')
  pair_parser.add_argument(
      '--output_json_path',
      help='The path of the json file to write the matrix and statistics to.')
  pair_parser.set_defaults(func=_PairMatrix)


def _AddResetSubParser(subparsers):
  """Adds sub parser for sub command `reset`."""
  def _Reset(args):
    """The function of sub command `reset`."""
    if not args.confirm:
      logging.error('The reset deletes all the simulators of the host. Pass '
                    '--confirm to run it.')
      return runner_exit_codes.EXITCODE.NOT_CONFIRMED
    resetter = fleet_resetter.FleetResetter(
        _CreateInvoker(args), options=_GetOptions(args))
    report = resetter.Reset()
    print(report.Render())
    if args.output_json_path:
      _WriteJson(args.output_json_path,
                 collections.OrderedDict([('statistics', report.AsDict())]))
    return runner_exit_codes.EXITCODE.SUCCEEDED

  reset_parser = subparsers.add_parser(
      'reset',
      help='Delete all the simulators, then create one simulator per device '
           'type and available runtime.')
  reset_parser.add_argument(
      '--confirm', action='store_true',
      help='Confirm deleting all the simulators of the host.')
  reset_parser.add_argument(
      '--output_json_path',
      help='The path of the json file to write the statistics to.')
  reset_parser.set_defaults(func=_Reset)


def _AddCleanSubParser(subparsers):
  """Adds sub parser for sub command `clean`."""
  def _Clean(args):
    """The function of sub command `clean`."""
    options = _GetOptions(args)
    cleaner = fleet_cleaner.FleetCleaner(_CreateInvoker(args))
    removed = cleaner.Clean(
        fleet_cleaner.NamePrefixPredicate(options.test_name_prefix))
    print('Deleted %d simulators with name prefix "%s".' %
          (removed, options.test_name_prefix))
    return runner_exit_codes.EXITCODE.SUCCEEDED

  clean_parser = subparsers.add_parser(
      'clean',
      help='Delete the simulators left over by an interrupted pair_matrix.')
  clean_parser.set_defaults(func=_Clean)


def _AddListSubParser(subparsers):
  """Adds sub parser for sub command `list`."""
  def _List(args):
    """The function of sub command `list`."""
    inventory = sim_inventory.FetchInventory(_CreateInvoker(args))
    print('Device types:')
    for device_type in inventory.device_types:
      print('  %s (%s)' % (device_type.name, device_type.identifier))
    print('Runtimes:')
    for runtime in inventory.runtimes:
      print('  %s (%s)%s' % (runtime.name, runtime.identifier,
                             '' if runtime.is_available else ' unavailable'))
    print('Simulators:')
    for runtime_key, instances in inventory.instances_by_runtime.items():
      print('  %s: %d' % (runtime_key, len(instances)))
    return runner_exit_codes.EXITCODE.SUCCEEDED

  list_parser = subparsers.add_parser(
      'list',
      help='Print the device types, runtimes and the number of simulators '
           'per runtime.')
  list_parser.set_defaults(func=_List)


def _BuildParser():
  """Builds a parser which is to parse arguments/sub commands of fleet runner.

  Returns:
    a argparse object.
  """
  parser = argparse.ArgumentParser(
      formatter_class=argparse.RawTextHelpFormatter)
  _AddGeneralArguments(parser)
  subparsers = parser.add_subparsers(dest='command', help='Sub-commands help')
  subparsers.required = True
  _AddPairMatrixSubParser(subparsers)
  _AddResetSubParser(subparsers)
  _AddCleanSubParser(subparsers)
  _AddListSubParser(subparsers)
  return parser


def _CreateInvoker(args):
  """Creates the simctl invoker of the selected Xcode."""
  return simctl_invoker.SimctlInvoker(
      xcode_info_util.GetSimctlPath(xcode_path=args.xcode_path))


def _GetOptions(args):
  return fleet_options.FleetOptions(_GetJson(args.options_json_path))


def _GetJson(json_path):
  """Gets the json dict from the file."""
  if not json_path:
    return None
  try:
    with open(json_path) as input_file:
      return json.load(input_file)
  except (OSError, ValueError) as e:
    raise ios_errors.IllegalArgumentError(
        'Failed to read the json file %s: %s' % (json_path, e))


def _WriteJson(json_path, content):
  with open(json_path, 'w') as output_file:
    json.dump(content, output_file, indent=2)
  logging.info('Wrote the report to %s.', json_path)


def _LogError(exit_code, error):
  logging.error('%s: %s', runner_exit_codes.EXITCODE_INFOS[exit_code], error)
  return exit_code


def main(argv):
  args = _BuildParser().parse_args(argv[1:])
  if args.verbose:
    logging.basicConfig(level=logging.DEBUG, format='%(asctime)s %(message)s')
  else:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(message)s')
  try:
    exit_code = args.func(args)
  except ios_errors.ToolNotFoundError as e:
    exit_code = _LogError(runner_exit_codes.EXITCODE.TOOL_NOT_FOUND, e)
  except ios_errors.MalformedInventoryError as e:
    exit_code = _LogError(runner_exit_codes.EXITCODE.MALFORMED_INVENTORY, e)
  except ios_errors.IllegalArgumentError as e:
    exit_code = _LogError(runner_exit_codes.EXITCODE.ERROR, e)
  logging.info('Done.')
  return exit_code


if __name__ == '__main__':
  sys.exit(main(sys.argv))
