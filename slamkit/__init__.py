"""Grid SLAM building blocks: pose geometry, motion model, particle filter helpers, trajectory trees, GFS log tools and odometry calibration."""

__version__ = "0.1.0"

__all__ = [
    "calibration",
    "geometry",
    "gfs2log",
    "gfs2neff",
    "gfs2rec",
    "gfsreader",
    "motion",
    "odometry",
    "particlefilter",
    "tree",
]