from vo2perc._lattice import Point
from vo2perc._numerics import fermi, fermi_dist, solve_1d
from vo2perc.errors import *
from vo2perc.rng import *
from vo2perc.point_set import *
from vo2perc.grid import *
from vo2perc.matrix import *
from vo2perc.environment import *
from vo2perc.energetics import *
from vo2perc.monte_carlo import *
from vo2perc.survey import *
from vo2perc.logging_config import setup_logging
