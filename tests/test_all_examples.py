import unittest
import importlib
import os
import sys

EXAMPLE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..",
                           "examples")


def test_generator(modname):
    def run_example(self):
        no_throw = True
        msg = ""
        try:
            importlib.import_module(modname)
        except Exception as exc:
            msg = str(exc)
            no_throw = False
        self.assertTrue(no_throw, msg=msg)
    return run_example


test_generator.__test__ = False  # factory helper, not a test


class TestSequence(unittest.TestCase):
    pass


# Every file in the example folder is run as a test
if EXAMPLE_DIR not in sys.path:
    sys.path.append(EXAMPLE_DIR)

example_files = [fname for fname in os.listdir(EXAMPLE_DIR)
                 if fname.startswith("ex") and fname.endswith(".py")]
for fname in example_files:
    modname = fname.split(".")[0]
    setattr(TestSequence, "test_" + modname, test_generator(modname))

if __name__ == "__main__":
    from cecvm import TimeLoggingTestRunner
    unittest.main(testRunner=TimeLoggingTestRunner)
