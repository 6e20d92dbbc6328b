"""Frame-loop engine with a software rasterizer, input handling, a job system, a minimal ECS and a curses terminal surface."""

__version__ = "0.1.0"