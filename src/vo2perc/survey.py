import json
import logging
from dataclasses import asdict, dataclass
from typing import Optional

from vo2perc.grid import Grid

logger = logging.getLogger(__name__)

SEPARATOR = "\n" * 3


@dataclass
class GridAnalysis:
    """
    Summary of a grid consisting of a single cluster.

    Attributes:
        total_sites (int): Number of active sites.
        fermi (float): Fermi energy with one electron per active site.
        grid (list[list[bool]]): The site values, indexed [x][y].
    """
    total_sites: int
    fermi: float
    grid: list


def analyze_cluster(grid: Grid, energetics) -> Optional[GridAnalysis]:
    """Analyzes `grid` if its active sites form exactly one cluster, returns None otherwise."""
    if len(grid.all_clusters()) != 1:
        return None
    total_sites = grid.active_site_count()
    fermi = energetics.fermi_energy(grid, total_sites)
    return GridAnalysis(total_sites, fermi, grid.to_list())


def iter_grids(lx, ly):
    """Yields every configuration of an `lx` x `ly` grid, starting from the all-inactive one.

    The same Grid object is mutated between iterations; copy it to keep a configuration.
    """
    grid = Grid.from_dims(lx, ly)
    while True:
        yield grid
        if grid.next_grid():
            return


def brute_force_survey(grid_length: int, energetics, output_file_path: str) -> int:
    """Writes the analysis of every single-cluster configuration of a square grid to `output_file_path`.

    Each analysis is a JSON object followed by three newlines.

    Returns:
        int: number of analyses written
    """
    written = 0
    with open(output_file_path, "w") as f:
        for grid in iter_grids(grid_length, grid_length):
            analysis = analyze_cluster(grid, energetics)
            if analysis is None:
                continue
            f.write(json.dumps(asdict(analysis)) + SEPARATOR)
            written += 1
    logger.info("Survey of %dx%d grids wrote %d single-cluster configurations", grid_length, grid_length, written)
    return written
