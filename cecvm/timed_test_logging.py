"""
unittest runner that reports how long every test took

Usage:
    unittest.main(testRunner=TimeLoggingTestRunner)
"""
import time
import unittest
from unittest.runner import TextTestResult


class TimeLoggingTestResult(TextTestResult):
    def __init__(self, *args, **kwargs):
        super(TimeLoggingTestResult, self).__init__(*args, **kwargs)
        self.test_timings = []
        self._started_at = {}

    def startTest(self, test):
        self._started_at[test.id()] = time.perf_counter()
        super(TimeLoggingTestResult, self).startTest(test)

    def stopTest(self, test):
        started = self._started_at.pop(test.id(), None)
        if started is not None:
            elapsed = time.perf_counter() - started
            self.test_timings.append((elapsed, self.getDescription(test)))
        super(TimeLoggingTestResult, self).stopTest(test)

    def getTestTimings(self):
        return sorted(self.test_timings, reverse=True)


class TimeLoggingTestRunner(unittest.TextTestRunner):
    """
    Text runner that prints the slowest tests after the run

    :param num_slowest: Number of tests listed in the timing report.
        None lists all of them.
    """
    resultclass = TimeLoggingTestResult

    def __init__(self, *args, **kwargs):
        self.num_slowest = kwargs.pop("num_slowest", None)
        kwargs["resultclass"] = TimeLoggingTestResult
        super(TimeLoggingTestRunner, self).__init__(*args, **kwargs)

    def run(self, test):
        result = super(TimeLoggingTestRunner, self).run(test)
        timings = result.getTestTimings()
        if self.num_slowest is not None:
            timings = timings[:self.num_slowest]

        total = sum(t for t, _ in result.test_timings)
        self.stream.writeln("\nTiming results (total {:.2f}s)".format(total))
        for elapsed, name in timings:
            self.stream.writeln("{:>8.3f}s  {}".format(elapsed, name))
        return result
