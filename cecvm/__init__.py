from cecvm.timed_test_logging import TimeLoggingTestRunner
from cecvm.errors import InvalidInputError, SingularMatrixError
from cecvm.errors import InconsistencyError
from cecvm.config import CVMConfiguration
from cecvm.eci import ECISet
from cecvm.pipeline import identify, build_cmatrix, solve, CVMModel
