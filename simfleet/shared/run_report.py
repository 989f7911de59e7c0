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

"""The counters and elapsed time of one fleet run."""

import collections
import time


class RunReport(object):
  """Accumulates the named counters of a run.

  The set of counters is fixed when the report is created; they are rendered
  in that order.
  """

  def __init__(self, counter_names, clock=time.time):
    """Constructor of RunReport object.

    Args:
      counter_names: list of string, the names of the counters.
      clock: function, returns the current time in seconds.
    """
    self._clock = clock
    self._start_time = clock()
    self._counters = collections.OrderedDict(
        (name, 0) for name in counter_names)

  def Increment(self, name, amount=1):
    """Increases the counter.

    Raises:
      KeyError: the counter is not one of the report.
    """
    if name not in self._counters:
      raise KeyError('Unknown counter %s.' % name)
    self._counters[name] += amount

  def Get(self, name):
    return self._counters[name]

  def ElapsedSeconds(self):
    return self._clock() - self._start_time

  def Render(self):
    """Renders the elapsed time and the counters as text lines."""
    minutes, seconds = divmod(self.ElapsedSeconds(), 60)
    lines = ['Elapsed time: %d min %.2f sec' % (minutes, seconds)]
    label_width = max([len(name) for name in self._counters] or [0])
    for name, value in self._counters.items():
      label = name.replace('_', ' ').capitalize()
      lines.append('%s: %d' % (label.ljust(label_width), value))
    return '\n'.join(lines)

  def AsDict(self):
    stats = collections.OrderedDict(self._counters)
    stats['elapsed_seconds'] = round(self.ElapsedSeconds(), 3)
    return stats
