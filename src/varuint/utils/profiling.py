"""Profiling support for the varuint command line tool using cProfile.

When the VARUINT_PROFILE environment variable is set to a directory path, each
run of the entry point dumps its profile into a session subdirectory named
{timestamp_ms}_{pid}.
"""
import cProfile
import functools
import itertools
import os
import time
from pathlib import Path
from typing import Callable, TypeVar, ParamSpec

P = ParamSpec('P')
T = TypeVar('T')

PROFILE_ENV = 'VARUINT_PROFILE'

# Sequence numbers keep filenames unique when one process profiles several calls
_profile_counter = itertools.count()


def get_profile_dir() -> Path | None:
    """Get the session profile directory, or None if profiling is disabled."""
    profile_path = os.environ.get(PROFILE_ENV)
    if not profile_path:
        return None

    timestamp_ms = int(time.time() * 1000)
    return Path(profile_path) / f"{timestamp_ms}_{os.getpid()}"


def generate_profile_filename(prefix: str = "profile") -> str:
    """Generate a unique profile filename like "main_54398_0.prof"."""
    return f"{prefix}_{os.getpid()}_{next(_profile_counter)}.prof"


def profile_function(func: Callable[P, T], prefix: str = "profile") -> Callable[P, T]:
    """Wrap func so that it runs under cProfile if VARUINT_PROFILE is set.

    Args:
        func: Function to profile
        prefix: Prefix for the profile filename

    Returns:
        Wrapped function; stats are dumped even if func raises
    """
    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        profile_dir = get_profile_dir()

        if profile_dir is None:
            return func(*args, **kwargs)

        profile_dir.mkdir(parents=True, exist_ok=True)
        profile_file = profile_dir / generate_profile_filename(prefix)

        profiler = cProfile.Profile()
        try:
            profiler.enable()
            return func(*args, **kwargs)
        finally:
            profiler.disable()
            profiler.dump_stats(str(profile_file))

    return wrapper


def profile_main(func: Callable[P, T]) -> Callable[P, T]:
    """Decorator for the main entry point: profile_function with prefix "main"."""
    return profile_function(func, prefix="main")
