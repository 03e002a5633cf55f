"""Grid and project file I/O."""

from .grid_file import (
    SurveyProject,
    load_grid,
    load_project,
    save_grid,
    save_project,
    generate_sample_grid,
)

__all__ = [
    "SurveyProject",
    "load_grid",
    "load_project",
    "save_grid",
    "save_project",
    "generate_sample_grid",
]
