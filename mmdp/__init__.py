from mmdp.instance import Instance, read_instance
from mmdp.matheuristic import MMDPSolver, matheuristic
from mmdp.options import Options
from mmdp.solution import Solution

__all__ = ['Instance', 'read_instance', 'MMDPSolver', 'matheuristic', 'Options', 'Solution']
